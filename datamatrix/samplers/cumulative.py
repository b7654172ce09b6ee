"""Weighted exemplar selection over an inclusive cumulative-weight array."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from datamatrix.errors import (
    ConfigurationError,
    DegenerateDistributionError,
    UninitializedError,
)
from datamatrix.samplers import register_sampler

if TYPE_CHECKING:
    from datamatrix.extractor import FeatureVectorExtractor
    from datamatrix.matrix import DataMatrix


def search_cumulative(cumulative: np.ndarray, value: float) -> int:
    """Index of the exemplar whose cumulative range contains value.

    Exemplar i owns [cumulative[i-1], cumulative[i]). A value sitting exactly on
    a boundary goes to the exemplar whose range starts there, so zero-weight
    exemplars (empty ranges) are never returned. Values at or past the total,
    which rounding can produce, map to the last exemplar with positive weight.
    """
    index = int(np.searchsorted(cumulative, value, side="right"))
    if index >= len(cumulative):
        index = int(np.searchsorted(cumulative, cumulative[-1], side="left"))
    return index


@dataclass(frozen=True, eq=False)
class CumulativeWeight:
    """Inclusive running sum of exemplar weights; the last entry is the total."""

    values: np.ndarray

    @classmethod
    def from_weights(cls, weights: np.ndarray) -> "CumulativeWeight":
        weights = np.asarray(weights, dtype=np.float64).reshape(-1)
        if len(weights) == 0:
            raise ConfigurationError("Cannot build cumulative weights over zero exemplars")
        if not np.all(np.isfinite(weights)) or np.any(weights < 0.0):
            raise ConfigurationError("Exemplar weights must be finite and non-negative")
        values = np.cumsum(weights)
        values.setflags(write=False)
        return cls(values=values)

    @property
    def total(self) -> float:
        return float(self.values[-1])

    def __len__(self) -> int:
        return len(self.values)


class WeightedSampler:
    """
    Weighted draws, O(log n) each.

    Unbuilt until rebuild() is called; invalidate() (or set_matrix) returns it
    to Unbuilt. Draws are deterministic given the uniform value supplied.
    """

    def __init__(self) -> None:
        self.matrix: "DataMatrix" = None  # type: ignore
        self.cumulative: Optional[CumulativeWeight] = None

    @property
    def built(self) -> bool:
        return self.cumulative is not None

    @property
    def total_weight(self) -> float:
        if self.cumulative is None:
            raise UninitializedError("WeightedSampler has not been built; call rebuild() first")
        return self.cumulative.total

    def invalidate(self) -> None:
        self.cumulative = None

    def rebuild(self, extractor: "FeatureVectorExtractor") -> CumulativeWeight:
        """Walk every exemplar weight once and rebuild the cumulative array."""
        if not extractor.layout.weighted:
            raise ConfigurationError("Weighted sampling needs a weight_index; use uniform draws instead")
        self.cumulative = CumulativeWeight.from_weights(extractor.exemplar_weights())
        return self.cumulative

    def draw(self, value: float) -> int:
        """Exemplar index for a value drawn uniformly from [0, total_weight)."""
        if self.total_weight <= 0.0:
            raise DegenerateDistributionError("All exemplar weights are zero; nothing can be drawn")
        return search_cumulative(self.cumulative.values, value)

    def set_matrix(self, matrix: "DataMatrix") -> None:
        self.matrix = matrix
        self.invalidate()

    def sample_indices(self, batch_size: int, rng: np.random.Generator) -> np.ndarray:
        if self.cumulative is None:
            if self.matrix.weighted_sampler is self:
                # Through the matrix, so the rebuild is logged once.
                self.matrix.rebuild_weights()
            else:
                self.rebuild(self.matrix.extractor)
        total = self.total_weight
        if total <= 0.0:
            raise DegenerateDistributionError("All exemplar weights are zero; nothing can be drawn")
        values = rng.random(batch_size) * total
        cum = self.cumulative.values
        indices = np.searchsorted(cum, values, side="right")
        last = np.searchsorted(cum, total, side="left")
        return np.minimum(indices, last).astype(np.int64)


@register_sampler("weighted")
def _build_weighted(**kwargs) -> WeightedSampler:
    return WeightedSampler()
