from __future__ import annotations

import dataclasses
from typing import Any

from omegaconf import DictConfig, OmegaConf


def resolve_config(cfg: Any) -> dict[str, Any]:
    """Resolve a DictConfig, dataclass or mapping into a plain dict without None entries."""
    if cfg is None:
        return {}
    if dataclasses.is_dataclass(cfg) and not isinstance(cfg, type):
        cfg = dataclasses.asdict(cfg)
    if isinstance(cfg, DictConfig):
        cfg = OmegaConf.to_container(cfg, resolve=True)
    if not isinstance(cfg, dict):
        raise TypeError(f"Expected dict-like config, got: {type(cfg)}")
    return {k: v for k, v in cfg.items() if v is not None}
