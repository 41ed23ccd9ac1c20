"""Compress images to a target byte size by tuning quality, then resolution."""

from .codecs import Encoder, PillowEncoder, PillowResizer, Resizer
from .controller import (
    CompressionOutcome,
    CompressionState,
    SizeTargetController,
    compress,
    default_controller,
)
from .models import (
    CompressionError,
    EncodedBlob,
    EncodeFormat,
    FormatKind,
    NoBlobProducedError,
    PixelBuffer,
    SearchBounds,
    TargetSpec,
)
from .search import QualitySearch, SearchResult, search_quality

__all__ = [
    "CompressionError",
    "CompressionOutcome",
    "CompressionState",
    "EncodedBlob",
    "EncodeFormat",
    "Encoder",
    "FormatKind",
    "NoBlobProducedError",
    "PillowEncoder",
    "PillowResizer",
    "PixelBuffer",
    "QualitySearch",
    "Resizer",
    "SearchBounds",
    "SearchResult",
    "SizeTargetController",
    "TargetSpec",
    "compress",
    "default_controller",
    "search_quality",
]
