"""Feature vector extraction, scaling and conversion round trips."""
from __future__ import annotations

import numpy as np
import pytest

from datamatrix import (
    Borrowed,
    ConfigurationError,
    FeatureVectorExtractor,
    OutOfRangeError,
    Owned,
    UnsupportedFormatError,
    build_pipeline,
    derive_layout,
)


def _extractor(array, roles, weight_index=-1, conversion=None) -> FeatureVectorExtractor:
    layout = derive_layout(array.shape, roles, weight_index)
    return FeatureVectorExtractor(array, layout, build_pipeline(layout, conversion))


def test_extract_returns_raw_row_and_unit_weight(rows) -> None:
    ex = _extractor(rows, ["data", "feature"])
    ex.set_scale([1.0, 1.0, 1.0])

    fv, weight = ex.extract(2, want_weight=True)

    np.testing.assert_array_equal(fv, [7.0, 8.0, 9.0])
    assert weight == 1.0


def test_weight_is_excluded_and_scaled(rows) -> None:
    ex = _extractor(rows, ["data", "feature"], weight_index=2)
    ex.set_scale([1.0, 1.0], weight_scale=2.0)

    fv, weight = ex.extract(2, want_weight=True)

    assert ex.layout.feature_count == 2
    np.testing.assert_array_equal(fv, [7.0, 8.0])
    assert weight == pytest.approx(rows[2, 2] * 2.0)


def test_weight_ignores_feature_scale(rows) -> None:
    ex = _extractor(rows, ["data", "feature"], weight_index=0)
    ex.set_scale([10.0, 100.0], weight_scale=0.5)

    fv, weight = ex.extract(1, want_weight=True)

    np.testing.assert_array_equal(fv, [50.0, 600.0])
    assert weight == pytest.approx(2.0)


def test_weight_not_requested_is_none(rows) -> None:
    ex = _extractor(rows, ["data", "feature"])

    _, weight = ex.extract(0)

    assert weight is None


@pytest.mark.parametrize("index", [4, -1, 100])
def test_out_of_range_index(rows, index) -> None:
    ex = _extractor(rows, ["data", "feature"])

    with pytest.raises(OutOfRangeError):
        ex.extract(index)
    with pytest.raises(OutOfRangeError):
        ex.extract_external(index)


def test_output_buffer_is_reused(rows) -> None:
    ex = _extractor(rows, ["data", "feature"])

    first, _ = ex.extract(0)
    kept = first.copy()
    second, _ = ex.extract(3)

    assert first is second
    np.testing.assert_array_equal(first, [10.0, 11.0, 12.0])
    np.testing.assert_array_equal(kept, [1.0, 2.0, 3.0])


def test_dual_coordinates_come_first(image) -> None:
    ex = _extractor(image, ["dual", "dual", "feature"])

    fv, _ = ex.extract(4)  # pixel (1, 1)

    np.testing.assert_array_equal(fv, [1.0, 1.0, image[1, 1, 0], image[1, 1, 1]])


def test_dual_coordinates_are_scaled_but_never_converted(image) -> None:
    ex = _extractor(image, ["dual", "dual", "feature"], conversion="LL")
    ex.set_scale([0.5, 0.5, 1.0, 2.0])

    fv, _ = ex.extract(0)  # pixel (0, 0): log(0) would be -inf if converted

    np.testing.assert_allclose(fv, [0.0, 0.0, np.log(image[0, 0, 0]), 2.0 * np.log(image[0, 0, 1])], rtol=1e-6)


def test_feature_axes_before_data_axis() -> None:
    array = np.arange(6, dtype=np.float64).reshape(3, 2)  # features along axis 0
    ex = _extractor(array, ["feature", "data"])

    fv, _ = ex.extract(1)

    np.testing.assert_array_equal(fv, [1.0, 3.0, 5.0])


def test_non_contiguous_array(rows) -> None:
    transposed = np.ascontiguousarray(rows.T).T  # same values, Fortran order
    ex = _extractor(transposed, ["data", "feature"])

    fv, _ = ex.extract(2)

    assert not transposed.flags["C_CONTIGUOUS"]
    np.testing.assert_array_equal(fv, [7.0, 8.0, 9.0])


def test_integer_storage() -> None:
    array = np.array([[1, 200], [3, 255]], dtype=np.uint8)
    ex = _extractor(array, ["data", "feature"])

    fv, _ = ex.extract(1)

    assert fv.dtype == np.float64
    np.testing.assert_array_equal(fv, [3.0, 255.0])


def test_unsupported_storage_fails_at_construction() -> None:
    array = np.zeros((2, 2), dtype=np.complex64)
    layout = derive_layout(array.shape, ["data", "feature"])

    with pytest.raises(UnsupportedFormatError):
        FeatureVectorExtractor(array, layout)


def test_extract_external_skips_conversion_and_scale(rows) -> None:
    ex = _extractor(rows, ["data", "feature"], conversion="LLS")
    ex.set_scale([2.0, 3.0, 4.0])

    ext, _ = ex.extract_external(1)

    np.testing.assert_array_equal(ext, [4.0, 5.0, 6.0])


@pytest.mark.parametrize("conversion", [None, "L.S", "GGG"])
def test_extract_then_to_external_round_trips(conversion) -> None:
    array = np.array([[0.2, 0.4, 0.6], [0.1, 0.5, 0.9], [0.3, 0.3, 0.7]], dtype=np.float32)
    ex = _extractor(array, ["data", "feature"], conversion=conversion)
    ex.set_scale([0.5, 2.0, 4.0])

    for i in range(ex.layout.exemplar_count):
        fv, _ = ex.extract(i)
        back = ex.to_external(fv).array
        expected, _ = ex.extract_external(i)
        if conversion is None:
            np.testing.assert_array_equal(back, expected)
        else:
            np.testing.assert_allclose(back, expected, rtol=1e-5)


def test_to_internal_without_conversion_borrows(rows) -> None:
    ex = _extractor(rows, ["data", "feature"])
    ex.set_scale([1.0, 2.0, 3.0])
    external = np.array([1.0, 1.0, 1.0], dtype=np.float32)

    result = ex.to_internal(external)

    assert isinstance(result, Borrowed)
    assert result.borrowed
    assert result.array is external
    np.testing.assert_array_equal(external, [1.0, 2.0, 3.0])


def test_to_internal_with_conversion_owns(rows) -> None:
    ex = _extractor(rows, ["data", "feature"], conversion="SSS")
    external = np.array([4.0, 9.0, 16.0], dtype=np.float32)
    internal = np.zeros(3, dtype=np.float32)

    result = ex.to_internal(external, internal)

    assert isinstance(result, Owned)
    assert not result.borrowed
    assert result.array is internal
    np.testing.assert_allclose(internal, [2.0, 3.0, 4.0])
    np.testing.assert_array_equal(external, [4.0, 9.0, 16.0])


def test_to_internal_matches_extract(rows) -> None:
    ex = _extractor(rows, ["data", "feature"], conversion="LSL")
    ex.set_scale([1.0, 0.5, 2.0])

    ext, _ = ex.extract_external(3)
    converted = ex.to_internal(ext.copy()).array
    fv, _ = ex.extract(3)

    np.testing.assert_allclose(converted, fv, rtol=1e-6)


def test_vector_length_is_checked(rows) -> None:
    ex = _extractor(rows, ["data", "feature"])

    with pytest.raises(ConfigurationError):
        ex.to_internal(np.ones(2, dtype=np.float32))
    with pytest.raises(ConfigurationError):
        ex.to_external(np.ones(4, dtype=np.float32))


def test_scale_length_is_checked(rows) -> None:
    ex = _extractor(rows, ["data", "feature"], weight_index=0)

    with pytest.raises(ConfigurationError):
        ex.set_scale([1.0, 1.0, 1.0])


def test_exemplar_weights_match_per_exemplar_walk(image) -> None:
    ex = _extractor(image, ["data", "dual", "feature"], weight_index=1)
    ex.set_scale([1.0, 1.0], weight_scale=3.0)

    walked = [ex.extract_external(i, want_weight=True)[1] for i in range(ex.layout.exemplar_count)]

    np.testing.assert_allclose(ex.exemplar_weights(), walked)


def test_exemplar_weights_need_weight_index(rows) -> None:
    ex = _extractor(rows, ["data", "feature"])

    with pytest.raises(ConfigurationError):
        ex.exemplar_weights()


def test_nbytes_counts_scratch_buffers(rows) -> None:
    ex = _extractor(rows, ["data", "feature"])

    assert ex.nbytes >= 4 * 3 * 4


@pytest.mark.parametrize("scale", [[3.0, 0.1, 7.0], [1.3, 0.7, 1e-3]])
def test_round_trip_is_exact_for_arbitrary_scales(scale) -> None:
    rng = np.random.default_rng(0)
    array = rng.normal(scale=50.0, size=(200, 3)).astype(np.float32)
    ex = _extractor(array, ["data", "feature"])
    ex.set_scale(scale)

    for i in range(ex.layout.exemplar_count):
        fv, _ = ex.extract(i)
        back = ex.to_external(fv).array
        expected, _ = ex.extract_external(i)
        np.testing.assert_array_equal(back, expected)


def test_round_trip_with_conversion_and_arbitrary_scale() -> None:
    rng = np.random.default_rng(1)
    array = rng.uniform(0.05, 0.95, size=(50, 3)).astype(np.float32)
    ex = _extractor(array, ["data", "feature"], conversion="LSG")
    ex.set_scale([3.0, 0.1, 7.0])

    for i in range(ex.layout.exemplar_count):
        fv, _ = ex.extract(i)
        back = ex.to_external(fv).array
        expected, _ = ex.extract_external(i)
        np.testing.assert_allclose(back, expected, rtol=1e-5)


@pytest.mark.parametrize("external", [[1.0, 1.0, 1.0], np.ones(3, dtype=np.int32)])
def test_to_internal_rejects_inputs_it_cannot_borrow(rows, external) -> None:
    ex = _extractor(rows, ["data", "feature"])

    with pytest.raises(ConfigurationError):
        ex.to_internal(external)


def test_to_internal_borrows_float64_input(rows) -> None:
    ex = _extractor(rows, ["data", "feature"])
    ex.set_scale([3.0, 0.1, 7.0])
    external = np.array([1.0, 2.0, 3.0], dtype=np.float64)

    result = ex.to_internal(external)

    assert result.array is external
    np.testing.assert_allclose(external, [3.0, 0.2, 21.0], rtol=1e-6)
