from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .controller import AdaptiveFetchController
from .errors import AcquireCancelled, FetchFailure

logger = logging.getLogger(__name__)


@dataclass
class LoopSummary:
    cycles: int = 0
    success_count: int = 0
    failure_count: int = 0
    final_rate: float = 0.0


class FetchLoop:
    """Drives an AdaptiveFetchController until stopped or max_cycles is reached.

    URLs are taken round-robin. With workers > 1 the cycles run on a thread
    pool sharing one controller (and so one rate limiter). A FetchFailure is
    logged and counted, never fatal; stop() sets the cancel event, which
    also unblocks workers waiting for a permit. Any other exception in a
    worker stops the remaining workers and is re-raised from run()."""

    def __init__(
        self,
        controller: AdaptiveFetchController,
        urls: Iterable[str],
        workers: int = 1,
        max_cycles: Optional[int] = None,
        on_result: Optional[Callable[[str, Any], None]] = None,
    ) -> None:
        urls = list(urls)
        if not urls:
            raise ValueError("at least one url is required")
        self._controller = controller
        self._urls = itertools.cycle(urls)
        self._workers = max(1, int(workers))
        self._max_cycles = max_cycles
        self._on_result = on_result

        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._summary = LoopSummary()

    def stop(self) -> None:
        """Ask all workers to finish; pending permit waits are cancelled."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run(self) -> LoopSummary:
        """Run the loop to completion (blocking) and return the totals."""
        if self._workers == 1:
            self._worker()
        else:
            with ThreadPoolExecutor(max_workers=self._workers) as pool:
                futures = [pool.submit(self._worker) for _ in range(self._workers)]
                for fut in futures:
                    fut.result()
        with self._lock:
            self._summary.final_rate = self._controller.rate
            return LoopSummary(**vars(self._summary))

    def _next_url(self) -> Optional[str]:
        with self._lock:
            if self._max_cycles is not None and self._summary.cycles >= self._max_cycles:
                return None
            self._summary.cycles += 1
            return next(self._urls)

    def _worker(self) -> None:
        try:
            self._work()
        except BaseException:
            # stop the other workers so run() returns
            self._stop.set()
            raise

    def _release_cycle(self) -> None:
        with self._lock:
            self._summary.cycles -= 1

    def _work(self) -> None:
        while not self._stop.is_set():
            url = self._next_url()
            if url is None:
                return
            if self._stop.is_set():
                self._release_cycle()
                return
            try:
                payload = self._controller.fetch(url, cancel=self._stop)
            except AcquireCancelled:
                self._release_cycle()
                return
            except FetchFailure as exc:
                with self._lock:
                    self._summary.failure_count += 1
                logger.warning("fetch failed url=%s error=%s rate=%.3f", url, exc.error_type, self._controller.rate)
                continue

            with self._lock:
                self._summary.success_count += 1
            logger.info("fetched url=%s rate=%.3f", url, self._controller.rate)
            if self._on_result is not None:
                self._on_result(url, payload)
