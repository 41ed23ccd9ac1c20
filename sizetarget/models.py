"""Value objects shared by the quality search and the size-target controller.

Everything here is immutable.  A compression request creates a
:class:`TargetSpec` and a source :class:`PixelBuffer`; the search produces
transient buffers and :class:`EncodedBlob` instances, and only the final
blob travels back to the caller inside a ``CompressionOutcome``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from . import config


class CompressionError(RuntimeError):
    """Base class for errors surfaced to compression callers."""


class NoBlobProducedError(CompressionError):
    """Raised when every encode attempt of a request failed."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Encoder produced no output after {attempts} attempt(s)")
        self.attempts = attempts


class FormatKind(Enum):
    LOSSY = "lossy"
    LOSSLESS = "lossless"


class EncodeFormat(Enum):
    """Output formats understood by the encoders, keyed by MIME type."""

    JPEG = "image/jpeg"
    WEBP = "image/webp"
    PNG = "image/png"

    @property
    def kind(self) -> FormatKind:
        if self is EncodeFormat.PNG:
            return FormatKind.LOSSLESS
        return FormatKind.LOSSY

    @property
    def is_lossless(self) -> bool:
        return self.kind is FormatKind.LOSSLESS

    @property
    def mime_type(self) -> str:
        return self.value

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def pil_format(self) -> str:
        return self.name

    @classmethod
    def from_value(cls, value: Union[str, "EncodeFormat"]) -> "EncodeFormat":
        """Resolve a MIME type, Pillow format name or file extension."""

        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().lstrip(".")
        for fmt in cls:
            if key in (fmt.value, fmt.name.lower(), fmt.extension):
                return fmt
        raise ValueError(f"Unsupported output format: {value!r}")


_EXTENSIONS = {
    EncodeFormat.JPEG: "jpg",
    EncodeFormat.WEBP: "webp",
    EncodeFormat.PNG: "png",
}


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded pixels with their dimensions.

    ``data`` is whatever the active resizer and encoder understand; the
    Pillow codecs store a ``PIL.Image.Image`` there.
    """

    width: int
    height: int
    data: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Invalid pixel buffer size: {self.width}x{self.height}")

    @classmethod
    def from_image(cls, image: Any) -> "PixelBuffer":
        width, height = image.size
        return cls(width=width, height=height, data=image)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class EncodedBlob:
    """Encoder output plus the parameters that produced it."""

    data: bytes = field(repr=False)
    format: EncodeFormat
    quality: Optional[float]
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)

    def fits(self, target_bytes: int) -> bool:
        return self.size <= target_bytes


@dataclass(frozen=True)
class SearchBounds:
    """Bisection bracket over encoder quality.

    Holds ``0 < low <= high < 1``.  The narrowing helpers only accept a
    point inside the current bracket, so a bracket can shrink but never
    widen.
    """

    low: float = config.QUALITY_LOW
    high: float = config.QUALITY_HIGH

    def __post_init__(self) -> None:
        if not 0.0 < self.low <= self.high < 1.0:
            raise ValueError(
                f"Search bounds must satisfy 0 < low <= high < 1, got [{self.low}, {self.high}]"
            )

    @property
    def span(self) -> float:
        return self.high - self.low

    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    def below(self, mid: float) -> "SearchBounds":
        """Return the lower half ``[low, mid]``."""
        self._check_inside(mid)
        return SearchBounds(self.low, mid)

    def above(self, mid: float) -> "SearchBounds":
        """Return the upper half ``[mid, high]``."""
        self._check_inside(mid)
        return SearchBounds(mid, self.high)

    def _check_inside(self, point: float) -> None:
        if not self.low <= point <= self.high:
            raise ValueError(f"{point} lies outside [{self.low}, {self.high}]")


@dataclass(frozen=True)
class TargetSpec:
    """Per-request settings: byte budget, initial width bound and format."""

    target_bytes: int
    max_dimension: int = config.DEFAULT_MAX_DIMENSION
    format: EncodeFormat = EncodeFormat.JPEG

    def __post_init__(self) -> None:
        if self.target_bytes <= 0:
            raise ValueError("target_bytes must be greater than zero")
        if self.max_dimension < config.MIN_DIMENSION:
            raise ValueError(
                f"max_dimension must be at least {config.MIN_DIMENSION}px"
            )
        object.__setattr__(self, "format", EncodeFormat.from_value(self.format))

    @classmethod
    def from_request(
        cls,
        target_kb: int,
        max_width: Optional[Union[int, str]] = None,
        fmt: Union[str, EncodeFormat] = config.DEFAULT_FORMAT,
    ) -> "TargetSpec":
        """Build a spec from raw form-style values.

        A blank width falls back to the default and anything narrower than
        the minimum dimension is raised to it.
        """
        if max_width is None or str(max_width).strip() == "":
            width = config.DEFAULT_MAX_DIMENSION
        else:
            width = int(max_width)
        return cls(
            target_bytes=int(target_kb) * config.BYTES_PER_KB,
            max_dimension=max(config.MIN_DIMENSION, width),
            format=EncodeFormat.from_value(fmt),
        )

    @property
    def target_kb(self) -> float:
        return self.target_bytes / config.BYTES_PER_KB
