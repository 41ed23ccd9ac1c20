"""Utility package for the size-target compressor."""

from . import image_operations, validation

__all__ = ["image_operations", "validation"]
