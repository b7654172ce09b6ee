"""Config-driven construction of a DataMatrix."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from omegaconf import DictConfig

from datamatrix.loggers import build_logger
from datamatrix.matrix import DataMatrix
from datamatrix.samplers import build_sampler
from datamatrix.utils.cfg import resolve_config


@dataclass
class DataMatrixConfig:
    """DataMatrix configuration."""

    roles: List[str] = field(default_factory=list)
    weight_index: int = -1  # negative = unweighted
    weight_scale: float = 1.0
    conversion: Optional[Any] = None  # None = no conversion
    scale: Optional[List[float]] = None  # None = all ones
    sampler: Optional[Any] = None  # None = auto
    logger: Optional[Dict[str, Any]] = None
    device: str = "cpu"


def build_data_matrix(
    array: np.ndarray,
    cfg: DictConfig | Dict[str, Any] | DataMatrixConfig,
) -> DataMatrix:
    """Build a DataMatrix over array from config.

    Expected keys: roles
    Optional keys: weight_index, weight_scale, conversion, scale, sampler,
    logger, device
    """
    cfg = resolve_config(cfg)

    roles = cfg.get("roles")
    if not roles:
        raise KeyError("Missing required config: data_matrix.roles")

    matrix = DataMatrix(
        logger=build_logger(cfg.get("logger")),
        sampler=build_sampler(cfg.get("sampler")),
        device=str(cfg.get("device", "cpu")),
    )
    matrix.attach(
        array,
        roles=list(roles),
        weight_index=cfg.get("weight_index", -1),
        conversion=cfg.get("conversion"),
    )

    scale = cfg.get("scale")
    weight_scale = float(cfg.get("weight_scale", 1.0))
    if scale is None:
        scale = np.ones(matrix.features, dtype=np.float32)
    matrix.set_scale(scale, weight_scale)
    return matrix


__all__ = ["DataMatrixConfig", "build_data_matrix"]
