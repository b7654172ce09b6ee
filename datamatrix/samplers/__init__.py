"""Pluggable exemplar sampling strategies for DataMatrix."""
from __future__ import annotations

from typing import Any, Callable, Dict, Protocol, TYPE_CHECKING

import numpy as np
from omegaconf import DictConfig

if TYPE_CHECKING:
    from datamatrix.matrix import DataMatrix


class Sampler(Protocol):
    """Sampler protocol: defines how to draw exemplar indices from a data matrix."""

    def set_matrix(self, matrix: "DataMatrix") -> None: ...

    def sample_indices(self, batch_size: int, rng: np.random.Generator) -> np.ndarray: ...


SAMPLER_REGISTRY: Dict[str, Callable[..., Sampler]] = {}


def register_sampler(name: str) -> Callable:
    """Register a sampler builder."""

    def decorator(fn: Callable[..., Sampler]) -> Callable[..., Sampler]:
        SAMPLER_REGISTRY[name] = fn
        return fn

    return decorator


def build_sampler(cfg: DictConfig | Dict[str, Any] | str | None) -> Sampler:
    """Build a sampler from config; None picks weighted sampling when available."""
    # Lazy import to trigger registration
    from datamatrix.samplers import auto, cumulative, uniform  # noqa: F401

    if cfg is None:
        return SAMPLER_REGISTRY["auto"]()
    if isinstance(cfg, str):
        cfg = {"type": cfg}
    if isinstance(cfg, DictConfig):
        cfg = dict(cfg)

    cfg = dict(cfg)
    sampler_type = cfg.pop("type", "auto")
    if sampler_type not in SAMPLER_REGISTRY:
        raise ValueError(f"Unknown sampler: {sampler_type}. Available: {list(SAMPLER_REGISTRY.keys())}")

    return SAMPLER_REGISTRY[sampler_type](**cfg)


from datamatrix.samplers.cumulative import (  # noqa: E402
    CumulativeWeight,
    WeightedSampler,
    search_cumulative,
)
from datamatrix.samplers.auto import AutoSampler  # noqa: E402
from datamatrix.samplers.uniform import UniformSampler  # noqa: E402

__all__ = [
    "Sampler",
    "SAMPLER_REGISTRY",
    "register_sampler",
    "build_sampler",
    "CumulativeWeight",
    "WeightedSampler",
    "UniformSampler",
    "AutoSampler",
    "search_cumulative",
]
