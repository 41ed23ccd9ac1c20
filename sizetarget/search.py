"""Fixed-budget bisection over encoder quality.

:class:`QualitySearch` looks for the richest quality whose encoded size
stays within a byte budget.  It always runs the full iteration count: the
encoder is the expensive part, so a request costs a predictable number of
encode calls instead of however many a convergence test would take.

The blob handed back is the one from the *last* successful encode, not the
largest one that fit.  The final bracket is narrow enough that the most
recent attempt is taken as the answer, which means the returned blob can
sit just above the budget.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from . import config
from .codecs import Encoder
from .models import EncodedBlob, EncodeFormat, NoBlobProducedError, PixelBuffer, SearchBounds

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    """Everything one quality search produced."""

    blob: Optional[EncodedBlob]
    bounds: SearchBounds
    attempts: int
    failures: int

    @property
    def succeeded(self) -> bool:
        return self.blob is not None


class QualitySearch:
    """Bisection over quality for a single buffer and format."""

    def __init__(
        self,
        encoder: Encoder,
        *,
        iterations: int = config.SEARCH_ITERATIONS,
        bounds: Optional[SearchBounds] = None,
    ) -> None:
        if iterations <= 0:
            raise ValueError("iterations must be greater than zero")
        self.encoder = encoder
        self.iterations = iterations
        self.initial_bounds = bounds or SearchBounds(config.QUALITY_LOW, config.QUALITY_HIGH)

    def run(self, pixels: PixelBuffer, fmt: EncodeFormat, target_bytes: int) -> SearchResult:
        """Search without raising; a missing blob is reported in the result."""

        bounds = self.initial_bounds
        if fmt.is_lossless:
            blob = self.encoder.encode(pixels, fmt, None)
            if blob is None:
                LOGGER.warning("Lossless %s encode of %dx%d produced no output",
                               fmt.name, pixels.width, pixels.height)
            return SearchResult(blob=blob, bounds=bounds, attempts=1,
                                failures=0 if blob is not None else 1)

        best: Optional[EncodedBlob] = None
        failures = 0
        for step in range(self.iterations):
            mid = bounds.midpoint()
            blob = self.encoder.encode(pixels, fmt, mid)
            if blob is None:
                failures += 1
                LOGGER.warning("Encode at quality %.4f failed (step %d); keeping bounds", mid, step + 1)
                continue

            best = blob
            if blob.size > target_bytes:
                bounds = bounds.below(mid)
            else:
                bounds = bounds.above(mid)
            LOGGER.debug(
                "step %d: q=%.4f size=%d target=%d -> [%.4f, %.4f]",
                step + 1, mid, blob.size, target_bytes, bounds.low, bounds.high,
            )

        return SearchResult(blob=best, bounds=bounds, attempts=self.iterations, failures=failures)

    def search(self, pixels: PixelBuffer, fmt: EncodeFormat, target_bytes: int) -> EncodedBlob:
        """Return the last successfully encoded blob.

        Raises:
            NoBlobProducedError: if no encode attempt produced output.
        """

        result = self.run(pixels, fmt, target_bytes)
        if result.blob is None:
            raise NoBlobProducedError(result.attempts)
        return result.blob


def search_quality(
    pixels: PixelBuffer,
    fmt: EncodeFormat,
    target_bytes: int,
    encoder: Encoder,
) -> EncodedBlob:
    """Run a default :class:`QualitySearch` once."""

    return QualitySearch(encoder).search(pixels, fmt, target_bytes)
