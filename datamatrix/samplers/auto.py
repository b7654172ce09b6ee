"""Weighted sampling when the matrix is weighted, uniform otherwise."""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from datamatrix.samplers import register_sampler
from datamatrix.samplers.cumulative import WeightedSampler
from datamatrix.samplers.uniform import UniformSampler

if TYPE_CHECKING:
    from datamatrix.matrix import DataMatrix


class AutoSampler:
    def __init__(self) -> None:
        self.delegate: WeightedSampler | UniformSampler = UniformSampler()

    def set_matrix(self, matrix: "DataMatrix") -> None:
        self.delegate = matrix.weighted_sampler if matrix.weighted else UniformSampler()
        self.delegate.set_matrix(matrix)

    def sample_indices(self, batch_size: int, rng: np.random.Generator) -> np.ndarray:
        return self.delegate.sample_indices(batch_size, rng)


@register_sampler("auto")
def _build_auto(**kwargs) -> AutoSampler:
    return AutoSampler()
