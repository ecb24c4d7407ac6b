from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Optional

from .errors import FetchFailure
from .metrics import MetricsCollector
from .models import FetchOutcome, FetchRecord, RateControlConfig
from .rate_limiter import RateLimiter
from .strategies import MultiplicativeLatencyStrategy, RateAdjustmentStrategy

logger = logging.getLogger(__name__)


class AdaptiveFetchController:
    """Runs one rate-limited fetch cycle per call and tunes the rate from its latency.

    Each fetch() acquires a permit, delegates to the fetch collaborator,
    feeds the reported latency to adjust_rate() and returns the payload.
    A FetchFailure propagates unchanged and leaves the rate untouched.
    The controller owns no loop; callers decide how often to call it."""

    def __init__(
        self,
        fetcher: Any,
        config: Optional[RateControlConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        strategy: Optional[RateAdjustmentStrategy] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._fetcher = fetcher
        self._config = config or RateControlConfig()
        if rate_limiter is None:
            rate_limiter = RateLimiter(self._config.initial_rate)
        else:
            rate_limiter.update_rate(self._config.clamp)
        self._rate_limiter = rate_limiter
        self._strategy = strategy or MultiplicativeLatencyStrategy(self._config)
        self._metrics = metrics

    @property
    def config(self) -> RateControlConfig:
        return self._config

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def rate(self) -> float:
        return self._rate_limiter.get_rate()

    def fetch(self, url: str, cancel: Optional[threading.Event] = None) -> Any:
        """Run one acquire -> fetch -> adjust cycle and return the fetched payload."""
        self._rate_limiter.acquire(cancel)
        try:
            outcome: FetchOutcome = self._fetcher.fetch(url)
        except FetchFailure as exc:
            self._record(url, False, exc.status_code, None, exc.error_type)
            raise

        new_rate = self.adjust_rate(outcome.elapsed_ms)
        self._record(url, True, getattr(outcome.payload, "status_code", None), outcome.elapsed_ms, None, new_rate)
        return outcome.payload

    def adjust_rate(self, elapsed_ms: int) -> float:
        """Apply the latency rule atomically and return the rate now in effect."""

        def _next(rate: float) -> float:
            return self._config.clamp(self._strategy.propose(rate, elapsed_ms))

        old_rate, new_rate = self._rate_limiter.update_rate(_next)
        if new_rate != old_rate:
            log = {
                "timestamp": time.time(),
                "event": "rate_adjusted",
                "verdict": self._strategy.classify(elapsed_ms),
                "elapsed_ms": elapsed_ms,
                "old_rate": old_rate,
                "new_rate": new_rate,
            }
            logger.info(json.dumps(log))
        return new_rate

    def _record(
        self,
        url: str,
        success: bool,
        status_code: Optional[int],
        latency_ms: Optional[int],
        error_type: Optional[str],
        rate: Optional[float] = None,
    ) -> None:
        if self._metrics is None:
            return
        self._metrics.record_result(
            FetchRecord(
                url=url,
                success=success,
                status_code=status_code,
                latency_ms=latency_ms,
                error_type=error_type,
                rate=rate if rate is not None else self.rate,
            )
        )
