"""Storage codecs, one per supported numpy element type.

Integer kinds round to nearest on encode and then cast, so values outside the
storage range wrap (or are platform defined for float to int casts).
"""
from __future__ import annotations

from functools import partial

import numpy as np

from datamatrix.codecs import Codec, register_codec

STORAGE_KINDS = ("b1", "i1", "i2", "i4", "i8", "u1", "u2", "u4", "u8", "f2", "f4", "f8")


def _decode(values: np.ndarray) -> np.ndarray:
    return np.asarray(values).astype(np.float32)


def _encode(dtype: np.dtype, values: np.ndarray) -> np.ndarray:
    values = np.asarray(values)
    if dtype.kind in ("i", "u"):
        values = np.rint(values)
    return values.astype(dtype)


def _storage_codec(kind: str) -> Codec:
    dtype = np.dtype("?" if kind == "b1" else kind)
    return Codec(name=kind, decode=_decode, encode=partial(_encode, dtype))


for _kind in STORAGE_KINDS:
    register_codec(_kind)(partial(_storage_codec, _kind))
