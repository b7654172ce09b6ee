from __future__ import annotations

from typing import Any

from omegaconf import DictConfig

from datamatrix.loggers import Logger, register_logger


class ConsoleLogger(Logger):
    """Prints metrics as ``[tag] step=N key=value ...`` lines."""

    def __init__(self, tag: str = "DataMatrix"):
        self.tag = tag

    def log(self, metrics: dict[str, Any], step: int) -> None:
        fields = " ".join(f"{k}={v:.6g}" if isinstance(v, float) else f"{k}={v}" for k, v in metrics.items())
        print(f"[{self.tag}] step={step} {fields}")

    def finish(self) -> None:
        pass


@register_logger
def console(cfg: DictConfig | dict[str, Any]) -> ConsoleLogger:
    """Build a ConsoleLogger from config."""
    return ConsoleLogger(tag=str(cfg.get("tag") or "DataMatrix"))
