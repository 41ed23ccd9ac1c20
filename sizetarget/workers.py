# workers.py
"""
Background execution for independent compression requests.
A single request is always sequential; only separate requests run side by side.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from . import config
from .controller import CompressionOutcome, SizeTargetController
from .models import PixelBuffer, TargetSpec

LOGGER = logging.getLogger(__name__)


class CompressionQueue:
    """Runs compression requests on a shared thread pool."""

    def __init__(
        self,
        controller: SizeTargetController,
        max_concurrent: int = config.MAX_CONCURRENT_REQUESTS,
    ):
        if max_concurrent <= 0:
            raise ValueError("max_concurrent must be greater than zero")
        self.controller = controller
        self._pool = ThreadPoolExecutor(
            max_workers=max_concurrent, thread_name_prefix="sizetarget"
        )
        self._futures: List[Future] = []

    def submit(self, source: PixelBuffer, spec: TargetSpec) -> "Future[CompressionOutcome]":
        """Schedule one request and return its future."""
        future = self._pool.submit(self.controller.compress_detailed, source, spec)
        self._futures.append(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        try:
            self._futures.remove(future)
        except ValueError:
            pass

    def pending(self) -> int:
        return sum(1 for f in list(self._futures) if not f.done())

    def cancel_pending(self) -> int:
        """Cancel requests that have not started; running ones drain on their own."""
        cancelled = 0
        for future in list(self._futures):
            if future.cancel():
                cancelled += 1
        if cancelled:
            LOGGER.info("Cancelled %d queued compression request(s)", cancelled)
        return cancelled

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> "CompressionQueue":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=exc_type is None)


def compress_batch(
    jobs: Iterable[Tuple[Hashable, PixelBuffer, TargetSpec]],
    controller: SizeTargetController,
    *,
    max_concurrent: int = config.MAX_CONCURRENT_REQUESTS,
) -> Dict[Hashable, Optional[CompressionOutcome]]:
    """Compress several images in parallel.

    Returns a mapping from each job key to its outcome, or ``None`` when the
    request failed.
    """
    results: Dict[Hashable, Optional[CompressionOutcome]] = {}
    with CompressionQueue(controller, max_concurrent=max_concurrent) as queue:
        futures = [(key, queue.submit(source, spec)) for key, source, spec in jobs]
        for key, future in futures:
            try:
                results[key] = future.result()
            except Exception as e:
                LOGGER.error("Compression failed for %s: %s", key, e)
                results[key] = None
    return results
