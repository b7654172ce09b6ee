"""DataMatrix: role-aware feature access over a borrowed numpy array."""
from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Sequence

import numpy as np
import torch

from datamatrix.errors import UninitializedError
from datamatrix.extractor import Borrowed, FeatureVectorExtractor, Owned
from datamatrix.loggers import Logger, NullLogger
from datamatrix.pipeline import ConversionSpec, build_pipeline
from datamatrix.roles import Layout, RoleLike, derive_layout
from datamatrix.samplers import Sampler, WeightedSampler, build_sampler


class DataMatrix:
    """
    Wraps an exemplar-by-dimension array for density estimation.

    Each axis is assigned a role; exemplars are addressed by a single row-major
    index over the data and dual axes. The array is borrowed, never copied or
    resized. All derived state (layout, conversion, cumulative weights) is
    rebuilt whole on attach and dropped on detach.

    Not thread safe: one extraction in flight per instance, and structural
    changes (attach, set_scale) must not race readers.
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        sampler: Optional[Sampler] = None,
        device: str = "cpu",
    ) -> None:
        self.logger = logger if logger is not None else NullLogger()
        self.device = device
        self._extractor: Optional[FeatureVectorExtractor] = None
        self.sampler = sampler if sampler is not None else build_sampler(None)
        # One cumulative-weight cache, shared by draw() and the batch sampler.
        self._weighted = self.sampler if isinstance(self.sampler, WeightedSampler) else WeightedSampler()
        self._step = 0

    def attach(
        self,
        array: np.ndarray,
        roles: Sequence[RoleLike],
        weight_index: Optional[int] = -1,
        conversion: ConversionSpec = None,
    ) -> Layout:
        """Attach an array, replacing any previous one.

        Args:
            array: Array to borrow.
            roles: One of data/dual/feature per axis.
            weight_index: Flattened feature position holding the exemplar
                weight, or negative/None for unweighted exemplars.
            conversion: Optional conversion descriptor, one selector per
                flattened feature position.

        Returns:
            The derived layout. On failure the previous attachment is kept.
        """
        array = np.asarray(array)
        layout = derive_layout(array.shape, roles, weight_index)
        pipeline = build_pipeline(layout, conversion)
        extractor = FeatureVectorExtractor(array, layout, pipeline)

        self._extractor = extractor
        self._weighted.invalidate()
        self.sampler.set_matrix(self)
        self._log(
            {
                "exemplars": layout.exemplar_count,
                "features": layout.feature_count,
                "dual_features": layout.dual_feature_count,
                "weighted": int(layout.weighted),
                "converted": len(pipeline),
            }
        )
        return layout

    def detach(self) -> None:
        self._extractor = None
        self._weighted.invalidate()

    def _log(self, metrics: Dict[str, Any]) -> None:
        self.logger.log(metrics, step=self._step)
        self._step += 1

    @property
    def is_attached(self) -> bool:
        return self._extractor is not None

    @property
    def extractor(self) -> FeatureVectorExtractor:
        if self._extractor is None:
            raise UninitializedError("No array attached to DataMatrix")
        return self._extractor

    @property
    def weighted_sampler(self) -> WeightedSampler:
        return self._weighted

    @property
    def layout(self) -> Layout:
        return self.extractor.layout

    @property
    def array(self) -> np.ndarray:
        return self.extractor.array

    @property
    def exemplars(self) -> int:
        return self.layout.exemplar_count

    @property
    def features(self) -> int:
        return self.layout.feature_count

    @property
    def ext_features(self) -> int:
        return self.layout.ext_feature_count

    @property
    def dual_features(self) -> int:
        return self.layout.dual_feature_count

    @property
    def weighted(self) -> bool:
        return self.layout.weighted

    def set_scale(self, scale: Sequence[float], weight_scale: float = 1.0) -> None:
        """Set per-feature multipliers (length == features) and the weight multiplier."""
        self.extractor.set_scale(scale, weight_scale)
        self._weighted.invalidate()
        self.sampler.set_matrix(self)

    def fv(self, index: int, want_weight: bool = False):
        """Internal feature vector; the returned array is reused by the next call."""
        return self.extractor.extract(index, want_weight)

    def ext_fv(self, index: int, want_weight: bool = False):
        """External feature vector, no conversion or scaling."""
        return self.extractor.extract_external(index, want_weight)

    def to_int(self, external: np.ndarray, internal: Optional[np.ndarray] = None) -> Owned | Borrowed:
        return self.extractor.to_internal(external, internal)

    def to_ext(self, internal: np.ndarray, external: Optional[np.ndarray] = None) -> Owned:
        return self.extractor.to_external(internal, external)

    def rebuild_weights(self) -> WeightedSampler:
        """Rebuild the cumulative weights; raises ConfigurationError when unweighted."""
        self._weighted.rebuild(self.extractor)
        self._log({"total_weight": self._weighted.total_weight})
        return self._weighted

    def draw(self, rng: np.random.Generator) -> int:
        """Draw one exemplar index, weighted when a weight_index is set."""
        if not self.weighted:
            n = self.exemplars
            return min(int(rng.random() * n), n - 1)

        if not self._weighted.built:
            self.rebuild_weights()
        return self._weighted.draw(rng.random() * self._weighted.total_weight)

    def sample(
        self,
        batch_size: int,
        rng: Optional[np.random.Generator] = None,
        device: Optional[str] = None,
    ) -> Dict[str, torch.Tensor]:
        """Sample a batch of internal feature vectors using the configured sampler."""
        extractor = self.extractor
        rng = rng if rng is not None else np.random.default_rng()
        indices = self.sampler.sample_indices(batch_size, rng)

        features = np.empty((len(indices), self.features), dtype=np.float32)
        weights = np.empty(len(indices), dtype=np.float32)
        for row, i in enumerate(indices):
            fv, weight = extractor.extract(int(i), want_weight=True)
            features[row] = fv
            weights[row] = weight

        target = torch.device(device or self.device)
        return {
            "features": torch.from_numpy(features).to(target),
            "weights": torch.from_numpy(weights).to(target),
            "indices": torch.from_numpy(np.asarray(indices, dtype=np.int64)).to(target),
        }

    def as_dataloader(
        self,
        batch_size: int,
        rng: Optional[np.random.Generator] = None,
    ) -> Iterator[Dict[str, torch.Tensor]]:
        """Return an infinite iterator yielding batches."""
        rng = rng if rng is not None else np.random.default_rng()
        while True:
            yield self.sample(batch_size, rng)

    def byte_size(self) -> int:
        """Bytes consumed by the DataMatrix, excluding the array it points at."""
        if self._extractor is None:
            return 0
        size = self._extractor.nbytes
        if self._weighted.cumulative is not None:
            size += self._weighted.cumulative.values.nbytes
        return size

    def __len__(self) -> int:
        return self.exemplars


__all__ = ["DataMatrix"]
