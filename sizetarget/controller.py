"""Size-target controller.

Drives :class:`~sizetarget.search.QualitySearch` and falls back to
shrinking the image when quality alone cannot reach the byte budget.
Quality is always tried first; resolution is only given up afterwards, in
a bounded number of compounding shrink rounds.

The controller holds configuration only.  All per-request state lives in
local variables, so one instance can serve concurrent requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from utils.image_operations import fit_to_width, shrink_size

from . import config
from .codecs import Encoder, PillowEncoder, PillowResizer, Resizer
from .models import EncodedBlob, NoBlobProducedError, PixelBuffer, TargetSpec
from .search import QualitySearch

LOGGER = logging.getLogger(__name__)


class CompressionState(Enum):
    INIT = "init"
    RESIZED = "resized"
    SEARCHING = "searching"
    OVER_TARGET = "over_target"
    SHRINKING = "shrinking"
    UNDER_TARGET = "under_target"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class CompressionOutcome:
    """Final blob of a request plus how it was reached."""

    blob: EncodedBlob
    target_bytes: int
    state: CompressionState
    shrink_rounds: int
    searches: int
    encode_calls: int

    @property
    def target_met(self) -> bool:
        return self.blob.fits(self.target_bytes)


class SizeTargetController:
    """Find a quality and size whose encoded output fits a byte budget."""

    def __init__(
        self,
        encoder: Encoder,
        resizer: Resizer,
        *,
        search: Optional[QualitySearch] = None,
        shrink_factor: float = config.SHRINK_FACTOR,
        max_shrink_rounds: int = config.MAX_SHRINK_ROUNDS,
        min_dimension: int = config.MIN_DIMENSION,
    ) -> None:
        if not 0.0 < shrink_factor < 1.0:
            raise ValueError("shrink_factor must be between 0 and 1")
        if max_shrink_rounds < 0:
            raise ValueError("max_shrink_rounds cannot be negative")
        self.encoder = encoder
        self.resizer = resizer
        self.search = search or QualitySearch(encoder)
        self.shrink_factor = shrink_factor
        self.max_shrink_rounds = max_shrink_rounds
        self.min_dimension = min_dimension

    def _transition(self, state: CompressionState, pixels: PixelBuffer) -> None:
        LOGGER.debug("-> %s at %dx%d", state.value, pixels.width, pixels.height)

    def compress_detailed(self, source: PixelBuffer, spec: TargetSpec) -> CompressionOutcome:
        """Compress ``source`` towards ``spec.target_bytes``.

        Raises:
            NoBlobProducedError: if the first search yields nothing.
        """

        LOGGER.info(
            "Compressing %dx%d to %d bytes as %s (max width %d)",
            source.width, source.height, spec.target_bytes, spec.format.name, spec.max_dimension,
        )
        self._transition(CompressionState.INIT, source)

        width, height = fit_to_width(source.size, spec.max_dimension)
        current = self.resizer.resize(source, width, height)
        self._transition(CompressionState.RESIZED, current)

        self._transition(CompressionState.SEARCHING, current)
        result = self.search.run(current, spec.format, spec.target_bytes)
        searches = 1
        encode_calls = result.attempts
        if result.blob is None:
            LOGGER.error("No output produced for %dx%d", current.width, current.height)
            raise NoBlobProducedError(encode_calls)
        blob = result.blob

        rounds = 0
        while not blob.fits(spec.target_bytes) and rounds < self.max_shrink_rounds:
            self._transition(CompressionState.OVER_TARGET, current)
            width, height = shrink_size(current.size, self.shrink_factor, floor=self.min_dimension)
            current = self.resizer.resize(current, width, height)
            rounds += 1
            self._transition(CompressionState.SHRINKING, current)

            self._transition(CompressionState.SEARCHING, current)
            result = self.search.run(current, spec.format, spec.target_bytes)
            searches += 1
            encode_calls += result.attempts
            if result.blob is None:
                LOGGER.warning("Shrink round %d at %dx%d produced no output; keeping previous blob",
                               rounds, current.width, current.height)
                continue
            blob = result.blob
            LOGGER.info("Shrink round %d: %dx%d -> %d bytes", rounds, width, height, blob.size)

        if blob.fits(spec.target_bytes):
            state = CompressionState.UNDER_TARGET
        else:
            state = CompressionState.EXHAUSTED
            LOGGER.info("Target of %d bytes not reached; best effort is %d bytes",
                        spec.target_bytes, blob.size)
        self._transition(state, current)

        return CompressionOutcome(
            blob=blob,
            target_bytes=spec.target_bytes,
            state=state,
            shrink_rounds=rounds,
            searches=searches,
            encode_calls=encode_calls,
        )

    def compress(self, source: PixelBuffer, spec: TargetSpec) -> EncodedBlob:
        """Return the final blob, which may still exceed the target."""

        return self.compress_detailed(source, spec).blob


def default_controller() -> SizeTargetController:
    """Controller backed by the Pillow encoder and resizer."""

    return SizeTargetController(PillowEncoder(), PillowResizer())


def compress(
    source: PixelBuffer,
    spec: TargetSpec,
    *,
    encoder: Optional[Encoder] = None,
    resizer: Optional[Resizer] = None,
) -> EncodedBlob:
    """Compress ``source`` with Pillow unless other codecs are given."""

    controller = SizeTargetController(encoder or PillowEncoder(), resizer or PillowResizer())
    return controller.compress(source, spec)
