"""Feature vector extraction from an attached array.

One extraction in flight per extractor instance: ``extract`` and
``extract_external`` return buffers owned by the extractor which are
overwritten by the next call. Copy them if they need to outlive it.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from datamatrix.codecs import codec_for
from datamatrix.errors import ConfigurationError, OutOfRangeError
from datamatrix.pipeline import ConversionPipeline
from datamatrix.roles import Layout


@dataclass(frozen=True, eq=False)
class Owned:
    """Result written into a buffer the caller may keep using."""

    array: np.ndarray
    borrowed = False


@dataclass(frozen=True, eq=False)
class Borrowed:
    """Result aliasing the caller's input, which has been consumed."""

    array: np.ndarray
    borrowed = True


class FeatureVectorExtractor:
    """
    Maps exemplar indices to feature vectors.

    The vector holds one coordinate per dual axis followed by the flattened
    feature elements (weight position removed). Feature elements pass through
    the conversion pipeline; dual coordinates are already canonical and are
    never converted. Every element is then multiplied by the scale array.
    """

    def __init__(
        self,
        array: np.ndarray,
        layout: Layout,
        pipeline: Optional[ConversionPipeline] = None,
    ) -> None:
        if tuple(array.shape) != layout.shape:
            raise ConfigurationError(f"Array shape {array.shape} does not match layout shape {layout.shape}")
        self.array = array
        self.layout = layout
        self.pipeline = pipeline if pipeline is not None else ConversionPipeline()
        self.storage = codec_for(array.dtype)

        # Exemplar axes first, feature axes last; a view, never a copy.
        n_ex = len(layout.exemplar_axes)
        self._view = np.moveaxis(array, layout.feature_axes, list(range(n_ex, array.ndim)))
        self._positions = np.asarray(layout.feature_positions, dtype=np.int64)

        n = layout.feature_count
        self._scratch = np.empty(n, dtype=np.float32)
        self._ext_fv = np.empty(n, dtype=np.float32)
        # Scaled vectors are float64: a float32 value times a float32 scale is
        # exact there, so dividing the scale back out restores the value.
        self._fv = np.empty(n, dtype=np.float64)
        self._scale = np.ones(n, dtype=np.float32)
        self.weight_scale = 1.0

    @property
    def scale(self) -> np.ndarray:
        return self._scale

    def set_scale(self, scale: Sequence[float], weight_scale: float = 1.0) -> None:
        """Set the per-feature multipliers and the weight multiplier."""
        scale = np.array(scale, dtype=np.float32).reshape(-1)
        if len(scale) != self.layout.feature_count:
            raise ConfigurationError(
                f"Scale has {len(scale)} entries, expected {self.layout.feature_count}"
            )
        self._scale = scale
        self.weight_scale = float(weight_scale)

    def _fill(self, index: int, out: np.ndarray) -> np.ndarray:
        """Write dual coordinates and decoded features into out; return the raw row."""
        index = operator.index(index)
        count = self.layout.exemplar_count
        if not 0 <= index < count:
            raise OutOfRangeError(f"Exemplar index {index} out of range [0, {count})")

        coords = np.unravel_index(index, self.layout.exemplar_shape)
        for k, slot in enumerate(self.layout.dual_slots):
            out[k] = coords[slot]

        row = np.asarray(self._view[coords]).reshape(-1)
        out[self.layout.dual_feature_count :] = self.storage.decode(row[self._positions])
        return row

    def _weight(self, row: np.ndarray) -> float:
        if not self.layout.weighted:
            return 1.0
        return float(self.storage.decode(row[self.layout.weight_index])) * self.weight_scale

    def extract(self, index: int, want_weight: bool = False) -> Tuple[np.ndarray, Optional[float]]:
        """Converted and scaled feature vector of one exemplar.

        Returns:
            The reused output buffer, and the weight if requested (1.0 when the
            layout is unweighted).
        """
        row = self._fill(index, self._scratch)
        if self.pipeline.active:
            self.pipeline.apply(self._scratch, self._fv)
        else:
            self._fv[:] = self._scratch
        self._fv *= self._scale
        return self._fv, (self._weight(row) if want_weight else None)

    def extract_external(self, index: int, want_weight: bool = False) -> Tuple[np.ndarray, Optional[float]]:
        """As extract, but without conversion or scaling."""
        row = self._fill(index, self._ext_fv)
        return self._ext_fv, (self._weight(row) if want_weight else None)

    def exemplar_weights(self) -> np.ndarray:
        """Weights of every exemplar in index order, weight_scale applied."""
        if not self.layout.weighted:
            raise ConfigurationError("Layout has no weight_index; exemplars are unweighted")
        shape = self.layout.feature_shape
        coords = np.unravel_index(self.layout.weight_index, shape) if shape else ()
        column = np.asarray(self._view[(Ellipsis,) + tuple(coords)]).reshape(-1)
        return self.storage.decode(column).astype(np.float64) * self.weight_scale

    def _check_length(self, vec: np.ndarray) -> None:
        if vec.shape != (self.layout.feature_count,):
            raise ConfigurationError(
                f"Expected vector of length {self.layout.feature_count}, got shape {vec.shape}"
            )

    def to_internal(self, external: np.ndarray, internal: Optional[np.ndarray] = None) -> Owned | Borrowed:
        """Convert and scale an external vector.

        Without conversion the external buffer is scaled in place and returned
        as Borrowed, so the caller must not reuse its input. The input must be
        a floating point ndarray so that it can be scaled in place.
        """
        if not isinstance(external, np.ndarray) or external.dtype.kind != "f":
            raise ConfigurationError(
                f"Expected a floating point ndarray, got {type(external).__name__} "
                f"of dtype {getattr(external, 'dtype', None)}"
            )
        self._check_length(external)
        if not self.pipeline.active:
            external *= self._scale
            return Borrowed(external)

        if internal is None:
            internal = np.empty(self.layout.feature_count, dtype=np.float64)
        self.pipeline.apply(external, internal)
        internal *= self._scale
        return Owned(internal)

    def to_external(self, internal: np.ndarray, external: Optional[np.ndarray] = None) -> Owned:
        """Undo scaling and conversion; the internal vector is left untouched."""
        internal = np.asarray(internal, dtype=np.float64)
        self._check_length(internal)
        unscaled = internal / self._scale
        if external is None:
            external = np.empty(self.layout.feature_count, dtype=np.float32)
        if self.pipeline.active:
            self.pipeline.invert(unscaled, external)
        else:
            external[:] = unscaled
        return Owned(external)

    @property
    def nbytes(self) -> int:
        """Bytes held by the extractor, excluding the attached array."""
        return sum(
            a.nbytes for a in (self._scratch, self._ext_fv, self._fv, self._scale, self._positions)
        )


__all__ = ["Borrowed", "FeatureVectorExtractor", "Owned"]
