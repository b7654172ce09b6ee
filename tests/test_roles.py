"""Axis role parsing and layout derivation."""
from __future__ import annotations

import pytest

from datamatrix import AxisRole, ConfigurationError, derive_layout
from datamatrix.roles import parse_role


def test_single_feature_axis_layout() -> None:
    layout = derive_layout((4, 3), ["data", "feature"])

    assert layout.exemplar_count == 4
    assert layout.raw_feature_count == 3
    assert layout.ext_feature_count == 3
    assert layout.feature_count == 3
    assert layout.dual_feature_count == 0
    assert layout.feature_positions == (0, 1, 2)
    assert not layout.weighted


def test_weight_position_is_removed_from_features() -> None:
    layout = derive_layout((4, 3), ["data", "feature"], weight_index=2)

    assert layout.weighted
    assert layout.feature_count == 2
    assert layout.ext_feature_count == 2
    assert layout.feature_positions == (0, 1)


def test_weight_in_the_middle_keeps_row_major_order() -> None:
    layout = derive_layout((5, 2, 2), ["data", "feature", "feature"], weight_index=1)

    assert layout.raw_feature_count == 4
    assert layout.feature_positions == (0, 2, 3)


def test_dual_axes_index_exemplars_and_add_one_feature_each() -> None:
    layout = derive_layout((2, 3, 4), ["dual", "dual", "feature"])

    assert layout.exemplar_count == 6
    assert layout.exemplar_shape == (2, 3)
    assert layout.dual_feature_count == 2
    assert layout.dual_slots == (0, 1)
    assert layout.feature_count == 6


def test_interleaved_roles() -> None:
    layout = derive_layout((3, 2, 5, 7), ["feature", "data", "feature", "dual"])

    assert layout.exemplar_axes == (1, 3)
    assert layout.exemplar_count == 14
    assert layout.dual_slots == (1,)
    assert layout.feature_axes == (0, 2)
    assert layout.feature_shape == (3, 5)
    assert layout.feature_count == 1 + 15


def test_no_feature_axes_gives_one_scalar_feature() -> None:
    layout = derive_layout((10,), ["data"])

    assert layout.exemplar_count == 10
    assert layout.feature_count == 1


@pytest.mark.parametrize(
    "alias, expected",
    [
        ("d", AxisRole.DATA),
        ("U", AxisRole.DUAL),
        ("Feature", AxisRole.FEATURE),
        (AxisRole.DUAL, AxisRole.DUAL),
    ],
)
def test_parse_role_aliases(alias, expected) -> None:
    assert parse_role(alias) is expected


@pytest.mark.parametrize(
    "shape, roles, weight_index",
    [
        ((4, 3), ["data"], -1),
        ((4, 3), ["data", "feature", "feature"], -1),
        ((4, 3), ["feature", "feature"], -1),
        ((0, 3), ["data", "feature"], -1),
        ((4, 3), ["data", "feature"], 3),
        ((4, 3), ["data", "spatial"], -1),
    ],
)
def test_invalid_configurations_raise(shape, roles, weight_index) -> None:
    with pytest.raises(ConfigurationError):
        derive_layout(shape, roles, weight_index)


def test_none_weight_index_means_unweighted() -> None:
    layout = derive_layout((4, 3), ["data", "feature"], weight_index=None)

    assert layout.weight_index == -1
    assert layout.feature_count == 3
