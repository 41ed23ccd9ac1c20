"""Load image files into pixel buffers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from utils.validation import validate_image_path

from . import config
from .models import CompressionError, PixelBuffer

LOGGER = logging.getLogger(__name__)


class ImageLoadError(CompressionError):
    """Raised when an input file cannot be decoded."""


def load_pixels(path: Union[str, Path]) -> Tuple[PixelBuffer, int]:
    """Decode ``path`` and return its pixels and the file size in bytes.

    Raises:
        ValueError: for a missing file or an unsupported extension.
        ImageLoadError: when Pillow cannot decode the file.
    """
    safe_path = validate_image_path(path, config.SUPPORTED_IMAGE_FORMATS)
    try:
        with Image.open(safe_path) as img:
            # Normalize orientation once
            image = ImageOps.exif_transpose(img)
            image.load()
    except (UnidentifiedImageError, OSError) as e:
        LOGGER.error("Cannot decode %s: %s", safe_path, e)
        raise ImageLoadError(f"Failed to load image: {e}") from e

    return PixelBuffer.from_image(image), safe_path.stat().st_size
