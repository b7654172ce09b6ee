from __future__ import annotations

import math
from numbers import Real
from typing import Any

from omegaconf import DictConfig

from datamatrix.loggers import Logger, register_logger


def _scalar_metrics(metrics: dict[str, Any]) -> dict[str, float]:
    """Keep finite real-valued metrics; flags and labels are dropped."""
    out = {}
    for key, value in metrics.items():
        if hasattr(value, "item"):
            value = value.item()
        if isinstance(value, bool) or not isinstance(value, Real):
            continue
        if math.isfinite(value):
            out[key] = float(value)
    return out


class SwanLabLogger(Logger):
    """Forwards data matrix metrics to a SwanLab run."""

    def __init__(self, run: Any, backend: Any):
        self._run = run
        self._backend = backend

    def log(self, metrics: dict[str, Any], step: int) -> None:
        scalars = _scalar_metrics(metrics)
        if self._run is not None and scalars:
            self._backend.log(scalars, step=step)

    def finish(self) -> None:
        if self._run is not None:
            self._backend.finish()


@register_logger
def swanlab(cfg: DictConfig | dict[str, Any]) -> SwanLabLogger:
    """Build a SwanLabLogger from config; swanlab is only imported when selected."""
    import swanlab as backend

    run = backend.init(
        project=str(cfg.get("project", "datamatrix")),
        experiment_name=cfg.get("experiment_name"),
        description=cfg.get("description"),
        tags=list(cfg.get("tags") or []),
        logdir=cfg.get("logdir"),
        mode=str(cfg.get("mode", "local")),
    )
    return SwanLabLogger(run, backend)
