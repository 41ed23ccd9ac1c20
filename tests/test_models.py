"""Tests for the value objects in :mod:`sizetarget.models`."""
from __future__ import annotations

import pytest

from sizetarget.models import (
    EncodedBlob,
    EncodeFormat,
    FormatKind,
    NoBlobProducedError,
    PixelBuffer,
    SearchBounds,
    TargetSpec,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("image/jpeg", EncodeFormat.JPEG),
        ("jpg", EncodeFormat.JPEG),
        ("JPEG", EncodeFormat.JPEG),
        (".webp", EncodeFormat.WEBP),
        ("image/png", EncodeFormat.PNG),
        (EncodeFormat.PNG, EncodeFormat.PNG),
    ],
)
def test_format_resolution(value, expected):
    assert EncodeFormat.from_value(value) is expected


def test_unknown_format_rejected():
    with pytest.raises(ValueError):
        EncodeFormat.from_value("image/gif")


def test_format_kinds_and_extensions():
    assert EncodeFormat.PNG.kind is FormatKind.LOSSLESS
    assert EncodeFormat.JPEG.kind is FormatKind.LOSSY
    assert EncodeFormat.WEBP.kind is FormatKind.LOSSY
    assert [fmt.extension for fmt in EncodeFormat] == ["jpg", "webp", "png"]


def test_search_bounds_invariant():
    for low, high in [(0.0, 0.5), (0.6, 0.5), (0.5, 1.0)]:
        with pytest.raises(ValueError):
            SearchBounds(low, high)


def test_search_bounds_only_narrow():
    bounds = SearchBounds(0.05, 0.95)
    mid = bounds.midpoint()
    assert mid == pytest.approx(0.5)
    assert bounds.below(mid) == SearchBounds(0.05, mid)
    assert bounds.above(mid) == SearchBounds(mid, 0.95)
    with pytest.raises(ValueError):
        bounds.below(0.99)
    with pytest.raises(ValueError):
        bounds.above(0.01)


def test_pixel_buffer_rejects_empty_dimensions():
    with pytest.raises(ValueError):
        PixelBuffer(width=0, height=10)


def test_encoded_blob_size_and_fit():
    blob = EncodedBlob(b"x" * 100, EncodeFormat.JPEG, 0.5, 10, 10)
    assert blob.size == 100
    assert blob.fits(100)
    assert not blob.fits(99)


def test_target_spec_validation():
    with pytest.raises(ValueError):
        TargetSpec(target_bytes=0)
    with pytest.raises(ValueError):
        TargetSpec(target_bytes=100, max_dimension=199)


def test_target_spec_accepts_format_strings():
    spec = TargetSpec(target_bytes=100, format="webp")
    assert spec.format is EncodeFormat.WEBP


@pytest.mark.parametrize(
    "max_width, expected",
    [(None, 1200), ("", 1200), ("800", 800), (50, 200)],
)
def test_target_spec_from_request(max_width, expected):
    spec = TargetSpec.from_request(50, max_width, "image/jpeg")
    assert spec.target_bytes == 50 * 1024
    assert spec.max_dimension == expected
    assert spec.target_kb == 50


def test_no_blob_error_reports_attempts():
    err = NoBlobProducedError(12)
    assert err.attempts == 12
    assert "12" in str(err)
