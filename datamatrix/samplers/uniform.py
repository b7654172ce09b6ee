"""Uniform sampler implementation."""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from datamatrix.samplers import register_sampler

if TYPE_CHECKING:
    from datamatrix.matrix import DataMatrix


class UniformSampler:
    """Uniform random sampling, ignoring any weights."""

    def __init__(self) -> None:
        self.matrix: "DataMatrix" = None  # type: ignore

    def set_matrix(self, matrix: "DataMatrix") -> None:
        self.matrix = matrix

    def sample_indices(self, batch_size: int, rng: np.random.Generator) -> np.ndarray:
        return rng.integers(0, self.matrix.exemplars, size=batch_size, dtype=np.int64)


@register_sampler("uniform")
def _build_uniform(**kwargs) -> UniformSampler:
    return UniformSampler()
