"""Human-readable summaries of a finished compression request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import config
from .controller import CompressionOutcome
from .models import EncodedBlob, EncodeFormat


def kb(num_bytes: int) -> str:
    """Format a byte count as kilobytes with one decimal."""

    return f"{num_bytes / config.BYTES_PER_KB:.1f}"


def output_name(target_kb: int, fmt: EncodeFormat) -> str:
    return f"compressed-{target_kb}kb.{fmt.extension}"


def savings_percent(original_bytes: int, blob: EncodedBlob) -> float:
    """Percentage saved relative to the original file, one decimal."""

    if original_bytes <= 0:
        return 0.0
    return round((1 - blob.size / original_bytes) * 100, 1)


def status_message(target_met: bool, target_kb: int) -> str:
    if target_met:
        return f"Done. Under target ({target_kb}KB)."
    return "Compressed, but still above target. Try lower max width."


@dataclass(frozen=True)
class CompressionReport:
    name: str
    size_bytes: int
    savings: float
    width: int
    height: int
    quality: Optional[float]
    target_met: bool
    status: str

    @classmethod
    def build(
        cls,
        outcome: CompressionOutcome,
        original_bytes: int,
        target_kb: int,
        name: Optional[str] = None,
    ) -> "CompressionReport":
        blob = outcome.blob
        return cls(
            name=name or output_name(target_kb, blob.format),
            size_bytes=blob.size,
            savings=savings_percent(original_bytes, blob),
            width=blob.width,
            height=blob.height,
            quality=blob.quality,
            target_met=outcome.target_met,
            status=status_message(outcome.target_met, target_kb),
        )

    def summary(self) -> str:
        """One line in the form ``name • 19.8 KB • saved 94.1%``."""

        return f"{self.name} • {kb(self.size_bytes)} KB • saved {self.savings}%"
