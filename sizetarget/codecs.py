"""Encoder and resizer boundaries plus their Pillow implementations.

The search and the controller only talk to the :class:`Encoder` and
:class:`Resizer` protocols, so deterministic stubs can stand in for a real
codec in tests.  :class:`PillowEncoder` and :class:`PillowResizer` are the
production implementations.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, Dict, Optional, Protocol

from PIL import Image

from utils.image_operations import flatten_alpha, resize_image, to_png_mode

from . import config
from .models import EncodedBlob, EncodeFormat, PixelBuffer

LOGGER = logging.getLogger(__name__)


class Encoder(Protocol):
    def encode(
        self,
        pixels: PixelBuffer,
        fmt: EncodeFormat,
        quality: Optional[float] = None,
    ) -> Optional[EncodedBlob]:
        """Encode ``pixels``; return ``None`` when this attempt failed."""


class Resizer(Protocol):
    def resize(self, pixels: PixelBuffer, width: int, height: int) -> PixelBuffer:
        """Return a new buffer scaled to ``width`` x ``height``."""


def pil_quality(quality: float) -> int:
    """Map a quality in (0, 1) onto Pillow's 1..100 scale."""

    return max(1, min(100, round(quality * 100)))


class PillowEncoder:
    """Encode ``PIL.Image`` buffers into an in-memory byte blob."""

    def __init__(
        self,
        *,
        webp_method: int = config.WEBP_METHOD,
        png_compress_level: int = config.PNG_COMPRESS_LEVEL,
    ) -> None:
        self.webp_method = webp_method
        self.png_compress_level = png_compress_level

    def save_params(self, fmt: EncodeFormat, quality: Optional[float]) -> Dict[str, Any]:
        params: Dict[str, Any] = {'format': fmt.pil_format}
        if fmt is EncodeFormat.JPEG:
            params['optimize'] = True
            if quality is not None:
                params['quality'] = pil_quality(quality)
        elif fmt is EncodeFormat.WEBP:
            params['method'] = self.webp_method
            if quality is not None:
                params['quality'] = pil_quality(quality)
        elif fmt is EncodeFormat.PNG:
            params.update({
                'optimize': True,
                'compress_level': self.png_compress_level,
            })
        return params

    def encode(
        self,
        pixels: PixelBuffer,
        fmt: EncodeFormat,
        quality: Optional[float] = None,
    ) -> Optional[EncodedBlob]:
        image: Image.Image = pixels.data
        if fmt.is_lossless:
            quality = None

        buf = BytesIO()
        try:
            if fmt.is_lossless:
                image = to_png_mode(image)
            elif fmt is EncodeFormat.JPEG:
                image = flatten_alpha(image)
            image.save(buf, **self.save_params(fmt, quality))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Encoding %s at quality %s failed: %s", fmt.name, quality, exc)
            return None

        return EncodedBlob(
            data=buf.getvalue(),
            format=fmt,
            quality=quality,
            width=pixels.width,
            height=pixels.height,
        )


class PillowResizer:
    """LANCZOS downscaling of ``PIL.Image`` buffers."""

    def resize(self, pixels: PixelBuffer, width: int, height: int) -> PixelBuffer:
        return PixelBuffer.from_image(resize_image(pixels.data, (width, height)))


__all__ = [
    "Encoder",
    "Resizer",
    "PillowEncoder",
    "PillowResizer",
    "pil_quality",
]
