from __future__ import annotations

from abc import ABC, abstractmethod

from .models import RateControlConfig

SLOW = "slow"
FAST = "fast"
ACCEPTABLE = "acceptable"


class RateAdjustmentStrategy(ABC):
    """Abstract base class for latency-driven rate adjustment rules.

    A strategy only proposes the next rate; the controller clamps the
    proposal to the configured bounds and stores it."""

    @abstractmethod
    def classify(self, elapsed_ms: int) -> str:
        """Return SLOW, FAST or ACCEPTABLE for a latency sample."""
        raise NotImplementedError

    @abstractmethod
    def propose(self, rate: float, elapsed_ms: int) -> float:
        """Return the unclamped rate that should follow a sample of elapsed_ms."""
        raise NotImplementedError


class MultiplicativeLatencyStrategy(RateAdjustmentStrategy):
    """Backs off or speeds up by a fixed fraction of the current rate.

    Latency above slow_threshold_ms shrinks the rate by adjustment_factor,
    latency below fast_threshold_ms grows it by the same factor, anything in
    between (inclusive) leaves it unchanged."""

    def __init__(self, config: RateControlConfig) -> None:
        self._factor = config.adjustment_factor
        self._slow_ms = config.slow_threshold_ms
        self._fast_ms = config.fast_threshold_ms

    def classify(self, elapsed_ms: int) -> str:
        if elapsed_ms > self._slow_ms:
            return SLOW
        if elapsed_ms < self._fast_ms:
            return FAST
        return ACCEPTABLE

    def propose(self, rate: float, elapsed_ms: int) -> float:
        verdict = self.classify(elapsed_ms)
        if verdict == SLOW:
            return rate - rate * self._factor
        if verdict == FAST:
            return rate + rate * self._factor
        return rate
