"""Conversion codecs used by conversion descriptors.

Each one can be selected by its name or a single-letter code, so a descriptor
can be written as ``"..LS"`` or ``["identity", "identity", "log", "sqrt"]``.
Inputs outside a transform's domain produce nan/inf.
"""
from __future__ import annotations

import numpy as np

from datamatrix.codecs import Codec, register_transform


def _f32(values: np.ndarray) -> np.ndarray:
    return np.asarray(values, dtype=np.float32)


@register_transform("identity", ".")
def identity() -> Codec:
    return Codec(name="identity", decode=_f32, encode=_f32)


@register_transform("log", "L")
def log() -> Codec:
    return Codec(
        name="log",
        decode=lambda x: np.log(_f32(x)),
        encode=lambda x: np.exp(_f32(x)),
    )


@register_transform("sqrt", "S")
def sqrt() -> Codec:
    return Codec(
        name="sqrt",
        decode=lambda x: np.sqrt(_f32(x)),
        encode=lambda x: np.square(_f32(x)),
    )


@register_transform("logit", "G")
def logit() -> Codec:
    """Proportions in (0, 1) to the real line."""

    def decode(x: np.ndarray) -> np.ndarray:
        x = _f32(x)
        return np.log(x) - np.log1p(-x)

    def encode(x: np.ndarray) -> np.ndarray:
        return (1.0 / (1.0 + np.exp(-_f32(x)))).astype(np.float32)

    return Codec(name="logit", decode=decode, encode=encode)
