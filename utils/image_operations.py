"""Reusable image sizing helpers.

Dimension arithmetic for the initial fit and the shrink rounds lives here
next to the Pillow operations that act on it.  Functions are intentionally
small and pure to keep them easy to test and to encourage reuse.
"""

from __future__ import annotations

from PIL import Image

WHITE = (255, 255, 255)

ALPHA_MODES = {"RGBA", "LA", "PA"}
PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


def fit_to_width(size: tuple[int, int], max_width: int) -> tuple[int, int]:
    """Scale ``size`` so its width does not exceed ``max_width``.

    Never upscales.  Both sides are rounded and kept at one pixel or more.
    """

    width, height = size
    scale = min(1.0, max_width / width)
    return max(1, round(width * scale)), max(1, round(height * scale))


def shrink_size(size: tuple[int, int], factor: float, *, floor: int) -> tuple[int, int]:
    """Multiply both sides of ``size`` by ``factor``, clamping each at ``floor``."""

    width, height = size
    return max(floor, round(width * factor)), max(floor, round(height * factor))


def flatten_alpha(image: Image.Image) -> Image.Image:
    """Return an RGB copy of ``image`` with transparency composited on white.

    Formats without an alpha channel, such as JPEG, need this before saving.
    """

    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")
    if image.mode in ALPHA_MODES:
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, WHITE)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def to_png_mode(image: Image.Image) -> Image.Image:
    """Return ``image`` in a mode PNG can store.

    CMYK, YCbCr, LAB and HSV become RGB, or RGBA when an alpha band exists.
    """

    if image.mode in PNG_MODES:
        return image
    return image.convert("RGBA" if "A" in image.getbands() else "RGB")


def resize_image(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Resize ``image`` to exactly ``size`` with high-quality filtering."""

    if image.size == size:
        return image.copy()
    return image.resize(size, Image.Resampling.LANCZOS)


__all__ = [
    "fit_to_width",
    "shrink_size",
    "flatten_alpha",
    "to_png_mode",
    "resize_image",
]
