"""Per-element codecs between an external representation and internal float32."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Set, Union

import numpy as np

from datamatrix.errors import UnsupportedFormatError

ArrayFn = Callable[[np.ndarray], np.ndarray]


@dataclass(frozen=True)
class Codec:
    """A pair of pure, vectorised element conversions.

    ``decode`` maps external values to the canonical float32 representation and
    ``encode`` maps back. Overflow and precision loss are whatever the
    underlying numpy operation does; codecs never raise on bad values.
    """

    name: str
    decode: ArrayFn
    encode: ArrayFn


CODEC_REGISTRY: Dict[str, Callable[[], Codec]] = {}
# Selectors usable in conversion descriptors; storage kinds are not.
TRANSFORM_NAMES: Set[str] = set()


def register_codec(*names: str) -> Callable:
    """Register a codec builder under one or more selector names."""

    def decorator(fn: Callable[[], Codec]) -> Callable[[], Codec]:
        for name in names:
            CODEC_REGISTRY[name] = fn
        return fn

    return decorator


def register_transform(*names: str) -> Callable:
    """Register a codec that conversion descriptors may select."""
    TRANSFORM_NAMES.update(names)
    return register_codec(*names)


def codec_key(kind: Union[str, np.dtype, type]) -> str:
    """Registry key for a selector name or numpy dtype."""
    if isinstance(kind, str):
        if kind in CODEC_REGISTRY:
            return kind
        try:
            dtype = np.dtype(kind)
        except TypeError:
            return kind
    else:
        dtype = np.dtype(kind)
    return f"{dtype.kind}{dtype.itemsize}"


def codec_for(kind: Union[str, np.dtype, type]) -> Codec:
    """Resolve a storage kind (dtype or dtype string) or transform selector."""
    # Lazy import to trigger registration
    from datamatrix.codecs import storage, transforms  # noqa: F401

    key = codec_key(kind)
    if key not in CODEC_REGISTRY:
        raise UnsupportedFormatError(f"No codec for {kind!r}. Available: {sorted(CODEC_REGISTRY)}")
    return CODEC_REGISTRY[key]()


def transform_for(selector: str) -> Codec:
    """Resolve a conversion selector; storage kinds and dtype strings are rejected."""
    from datamatrix.codecs import transforms  # noqa: F401

    if selector not in TRANSFORM_NAMES:
        raise UnsupportedFormatError(
            f"Unknown conversion selector {selector!r}. Available: {sorted(TRANSFORM_NAMES)}"
        )
    return CODEC_REGISTRY[selector]()


__all__ = [
    "Codec",
    "CODEC_REGISTRY",
    "TRANSFORM_NAMES",
    "register_codec",
    "register_transform",
    "codec_key",
    "codec_for",
    "transform_for",
]
