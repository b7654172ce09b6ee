"""Conversion pipeline between external and internal feature vectors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np

from datamatrix.codecs import Codec, transform_for
from datamatrix.errors import ConfigurationError
from datamatrix.roles import Layout

ConversionSpec = Union[None, str, Sequence[str]]


@dataclass(frozen=True)
class ConversionOp:
    """Convert one element, external_offset -> internal_offset."""

    codec: Codec
    external_offset: int
    internal_offset: int


class ConversionPipeline:
    """
    Ordered conversion ops over a feature vector.

    Offsets index the full emitted vector, so the dual prefix is never touched
    by an op. An inactive pipeline is a passthrough.
    """

    def __init__(
        self,
        ops: Sequence[ConversionOp] = (),
        weight_codec: Optional[Codec] = None,
    ) -> None:
        self.ops: Tuple[ConversionOp, ...] = tuple(ops)
        self.weight_codec = weight_codec
        # Ops sharing a codec run as one vectorised call.
        groups: Dict[str, Tuple[Codec, list, list]] = {}
        for op in self.ops:
            codec, ext, internal = groups.setdefault(op.codec.name, (op.codec, [], []))
            ext.append(op.external_offset)
            internal.append(op.internal_offset)
        self._groups = [
            (codec, np.asarray(ext, dtype=np.int64), np.asarray(internal, dtype=np.int64))
            for codec, ext, internal in groups.values()
        ]

    @property
    def active(self) -> bool:
        return bool(self.ops)

    def __len__(self) -> int:
        return len(self.ops)

    def apply(self, external: np.ndarray, internal: np.ndarray) -> np.ndarray:
        """Decode external into internal; elements without an op are copied."""
        internal[:] = external
        for codec, ext, dst in self._groups:
            internal[dst] = codec.decode(external[ext])
        return internal

    def invert(self, internal: np.ndarray, external: np.ndarray) -> np.ndarray:
        """Encode internal into external; elements without an op are copied."""
        external[:] = internal
        for codec, ext, src in self._groups:
            external[ext] = codec.encode(internal[src])
        return external


def _selectors(conversion: ConversionSpec) -> Tuple[str, ...]:
    if conversion is None:
        return ()
    if isinstance(conversion, str):
        if conversion.strip().lower() == "none":
            return ()
        return tuple(conversion)
    return tuple(str(c) for c in conversion)


def build_pipeline(layout: Layout, conversion: ConversionSpec = None) -> ConversionPipeline:
    """Build the pipeline for a layout from a conversion descriptor.

    Args:
        layout: Layout of the attached array.
        conversion: None/"none" for no conversion; otherwise one selector per
            flattened feature-axis position, weight position included, given as
            a string of single-letter codes or a sequence of codec names.

    Returns:
        A passthrough pipeline, or one op per emitted feature element.
    """
    selectors = _selectors(conversion)
    if not selectors:
        return ConversionPipeline()

    if len(selectors) != layout.raw_feature_count:
        raise ConfigurationError(
            f"Conversion descriptor has {len(selectors)} entries, "
            f"expected {layout.raw_feature_count} (one per feature position)"
        )
    codecs = [transform_for(s) for s in selectors]

    dual = layout.dual_feature_count
    ops = [
        ConversionOp(codec=codecs[pos], external_offset=dual + j, internal_offset=dual + j)
        for j, pos in enumerate(layout.feature_positions)
    ]
    weight_codec = codecs[layout.weight_index] if layout.weighted else None
    return ConversionPipeline(ops, weight_codec=weight_codec)


__all__ = ["ConversionOp", "ConversionPipeline", "ConversionSpec", "build_pipeline"]
