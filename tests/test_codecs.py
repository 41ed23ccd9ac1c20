"""Tests for the Pillow-backed encoder and resizer."""
from __future__ import annotations

import logging
from io import BytesIO

import pytest
from PIL import Image

from sizetarget.codecs import PillowEncoder, PillowResizer, pil_quality
from sizetarget.controller import default_controller
from sizetarget.models import EncodeFormat, PixelBuffer, TargetSpec


def _noise(size=(256, 192)) -> PixelBuffer:
    img = Image.effect_noise(size, 64).convert("RGB")
    return PixelBuffer.from_image(img)


def _gradient(size=(1600, 1200)) -> PixelBuffer:
    img = Image.linear_gradient("L").resize(size).convert("RGB")
    return PixelBuffer.from_image(img)


@pytest.mark.parametrize(
    "quality, expected",
    [(0.5, 50), (0.05, 5), (0.001, 1), (0.999, 100)],
)
def test_pil_quality_mapping(quality, expected):
    assert pil_quality(quality) == expected


def test_jpeg_encoding_carries_parameters():
    pixels = _noise()
    blob = PillowEncoder().encode(pixels, EncodeFormat.JPEG, 0.5)
    assert blob.data[:2] == b"\xff\xd8"
    assert blob.quality == 0.5
    assert (blob.width, blob.height) == (256, 192)
    with Image.open(BytesIO(blob.data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (256, 192)


@pytest.mark.parametrize("fmt", [EncodeFormat.JPEG, EncodeFormat.WEBP])
def test_lower_quality_gives_smaller_output(fmt):
    pixels = _noise()
    encoder = PillowEncoder()
    low = encoder.encode(pixels, fmt, 0.1)
    high = encoder.encode(pixels, fmt, 0.9)
    assert low.size < high.size


def test_png_ignores_quality():
    pixels = _noise((64, 64))
    encoder = PillowEncoder()
    blob = encoder.encode(pixels, EncodeFormat.PNG, 0.3)
    assert blob.quality is None
    assert blob.data.startswith(b"\x89PNG")
    assert blob.data == encoder.encode(pixels, EncodeFormat.PNG, None).data


def test_webp_output():
    blob = PillowEncoder().encode(_noise((64, 64)), EncodeFormat.WEBP, 0.7)
    assert blob.data[:4] == b"RIFF"
    assert blob.data[8:12] == b"WEBP"


def test_jpeg_flattens_transparency():
    img = Image.new("RGBA", (32, 32), (0, 128, 0, 128))
    blob = PillowEncoder().encode(PixelBuffer.from_image(img), EncodeFormat.JPEG, 0.8)
    assert blob is not None
    with Image.open(BytesIO(blob.data)) as decoded:
        assert decoded.mode == "RGB"


def test_encoder_failure_returns_none(monkeypatch, caplog):
    def broken_save(self, fp, *args, **kwargs):
        raise OSError("encoder exploded")

    monkeypatch.setattr(Image.Image, "save", broken_save)
    with caplog.at_level(logging.WARNING, logger="sizetarget.codecs"):
        blob = PillowEncoder().encode(_noise((8, 8)), EncodeFormat.JPEG, 0.5)
    assert blob is None
    assert "encoder exploded" in caplog.text


def test_resizer_returns_new_buffer():
    source = _noise((200, 100))
    resized = PillowResizer().resize(source, 50, 25)
    assert resized.size == (50, 25)
    assert resized.data.size == (50, 25)
    assert source.data.size == (200, 100)


def test_default_controller_end_to_end():
    spec = TargetSpec(target_bytes=30 * 1024, max_dimension=1200, format=EncodeFormat.JPEG)
    outcome = default_controller().compress_detailed(_gradient(), spec)
    blob = outcome.blob
    assert blob.width <= 1200
    assert blob.data[:2] == b"\xff\xd8"
    assert outcome.encode_calls == 12 * outcome.searches


@pytest.mark.parametrize("mode", ["CMYK", "YCbCr"])
def test_png_accepts_modes_png_cannot_store(mode):
    pixels = PixelBuffer.from_image(Image.new(mode, (30, 20)))
    blob = PillowEncoder().encode(pixels, EncodeFormat.PNG)
    assert blob is not None
    with Image.open(BytesIO(blob.data)) as decoded:
        assert decoded.mode == "RGB"
        assert decoded.size == (30, 20)


def test_cmyk_source_compresses_to_png():
    source = PixelBuffer.from_image(Image.new("CMYK", (300, 200)))
    spec = TargetSpec(target_bytes=10 ** 6, max_dimension=1200, format=EncodeFormat.PNG)
    outcome = default_controller().compress_detailed(source, spec)
    assert outcome.blob.data.startswith(b"\x89PNG")
    assert outcome.target_met
