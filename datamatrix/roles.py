"""Axis roles and the layout they imply."""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from datamatrix.errors import ConfigurationError


class AxisRole(enum.Enum):
    """Role of one axis of the attached array."""

    DATA = "data"
    DUAL = "dual"
    FEATURE = "feature"


_ROLE_ALIASES = {
    "data": AxisRole.DATA,
    "d": AxisRole.DATA,
    "dual": AxisRole.DUAL,
    "u": AxisRole.DUAL,
    "feature": AxisRole.FEATURE,
    "f": AxisRole.FEATURE,
}

RoleLike = Union[AxisRole, str]


def parse_role(role: RoleLike) -> AxisRole:
    """Accept an AxisRole, its value or a one-letter alias."""
    if isinstance(role, AxisRole):
        return role
    key = str(role).strip().lower()
    if key not in _ROLE_ALIASES:
        raise ConfigurationError(f"Unknown axis role: {role!r}. Available: {sorted(_ROLE_ALIASES)}")
    return _ROLE_ALIASES[key]


@dataclass(frozen=True)
class Layout:
    """
    Derived layout of an attached array.

    Exemplars are indexed row-major over the data and dual axes (in axis order).
    The emitted vector holds one coordinate per dual axis followed by the
    flattened feature-axis elements, with the weight position removed.
    """

    shape: Tuple[int, ...]
    roles: Tuple[AxisRole, ...]
    exemplar_axes: Tuple[int, ...]
    exemplar_shape: Tuple[int, ...]
    dual_axes: Tuple[int, ...]
    dual_slots: Tuple[int, ...]  # position of each dual axis inside exemplar_axes
    feature_axes: Tuple[int, ...]
    feature_shape: Tuple[int, ...]
    feature_positions: Tuple[int, ...]  # flattened feature offsets, weight skipped
    weight_index: int = -1

    @property
    def weighted(self) -> bool:
        return self.weight_index >= 0

    @property
    def exemplar_count(self) -> int:
        return math.prod(self.exemplar_shape)

    @property
    def raw_feature_count(self) -> int:
        return math.prod(self.feature_shape)

    @property
    def dual_feature_count(self) -> int:
        return len(self.dual_axes)

    @property
    def ext_feature_count(self) -> int:
        return self.dual_feature_count + len(self.feature_positions)

    @property
    def feature_count(self) -> int:
        # Conversion never changes cardinality.
        return self.ext_feature_count


def derive_layout(
    shape: Sequence[int],
    roles: Sequence[RoleLike],
    weight_index: Optional[int] = -1,
) -> Layout:
    """Validate a role assignment against an array shape and derive its layout.

    Args:
        shape: Shape of the array being attached.
        roles: One role per axis.
        weight_index: Flattened feature-axis position holding the weight;
            negative or None for unweighted exemplars.

    Returns:
        A frozen Layout. Nothing is kept on failure.
    """
    shape = tuple(int(s) for s in shape)
    if len(roles) != len(shape):
        raise ConfigurationError(
            f"Expected {len(shape)} axis roles for array of shape {shape}, got {len(roles)}"
        )
    parsed = tuple(parse_role(r) for r in roles)

    exemplar_axes = tuple(i for i, r in enumerate(parsed) if r is not AxisRole.FEATURE)
    exemplar_shape = tuple(shape[i] for i in exemplar_axes)
    if not exemplar_axes or math.prod(exemplar_shape) <= 0:
        raise ConfigurationError(
            f"No exemplars: roles {[r.value for r in parsed]} over shape {shape} index nothing"
        )

    dual_axes = tuple(i for i, r in enumerate(parsed) if r is AxisRole.DUAL)
    dual_slots = tuple(exemplar_axes.index(i) for i in dual_axes)
    feature_axes = tuple(i for i, r in enumerate(parsed) if r is AxisRole.FEATURE)
    feature_shape = tuple(shape[i] for i in feature_axes)
    raw = math.prod(feature_shape)

    if weight_index is None or weight_index < 0:
        weight_index = -1
    elif weight_index >= raw:
        raise ConfigurationError(
            f"weight_index {weight_index} out of range for {raw} flattened feature positions"
        )

    positions = tuple(p for p in range(raw) if p != weight_index)
    return Layout(
        shape=shape,
        roles=parsed,
        exemplar_axes=exemplar_axes,
        exemplar_shape=exemplar_shape,
        dual_axes=dual_axes,
        dual_slots=dual_slots,
        feature_axes=feature_axes,
        feature_shape=feature_shape,
        feature_positions=positions,
        weight_index=int(weight_index),
    )


__all__ = ["AxisRole", "Layout", "RoleLike", "derive_layout", "parse_role"]
