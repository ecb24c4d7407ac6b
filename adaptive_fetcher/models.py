from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import InvalidRateConfiguration


def _check_rate(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise InvalidRateConfiguration(f"{name} must be a finite number > 0, got {value!r}")


@dataclass(frozen=True)
class RateControlConfig:
    """Bounds, step and latency thresholds for the adaptive rate controller.

    Rates are permits per second, thresholds are milliseconds. Latencies in
    [fast_threshold_ms, slow_threshold_ms] form the dead band where the rate
    is left alone."""

    initial_rate: float = 10.0
    max_rate: float = 20.0
    min_rate: float = 1.0
    adjustment_factor: float = 0.1
    slow_threshold_ms: int = 5000
    fast_threshold_ms: int = 200

    def __post_init__(self) -> None:
        _check_rate("initial_rate", self.initial_rate)
        _check_rate("max_rate", self.max_rate)
        _check_rate("min_rate", self.min_rate)
        if self.min_rate > self.max_rate:
            raise InvalidRateConfiguration(
                f"min_rate ({self.min_rate}) must not exceed max_rate ({self.max_rate})"
            )
        if not self.min_rate <= self.initial_rate <= self.max_rate:
            raise InvalidRateConfiguration(
                f"initial_rate ({self.initial_rate}) must lie within "
                f"[{self.min_rate}, {self.max_rate}]"
            )
        if not 0 < self.adjustment_factor < 1:
            raise InvalidRateConfiguration(
                f"adjustment_factor must be in (0, 1), got {self.adjustment_factor!r}"
            )
        if self.fast_threshold_ms < 0 or self.slow_threshold_ms < 0:
            raise InvalidRateConfiguration("latency thresholds must be non-negative")
        if self.fast_threshold_ms > self.slow_threshold_ms:
            raise InvalidRateConfiguration(
                f"fast_threshold_ms ({self.fast_threshold_ms}) must not exceed "
                f"slow_threshold_ms ({self.slow_threshold_ms})"
            )

    def clamp(self, rate: float) -> float:
        return min(self.max_rate, max(self.min_rate, rate))


@dataclass(frozen=True)
class FetchOutcome:
    payload: Any
    elapsed_ms: int


@dataclass(frozen=True)
class Page:
    url: str
    final_url: str
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""


@dataclass(frozen=True)
class FetchRecord:
    url: str
    success: bool
    status_code: Optional[int]
    latency_ms: Optional[int]
    error_type: Optional[str]
    rate: float


@dataclass(frozen=True)
class MetricsSnapshot:
    window_secs: int
    total_requests: int
    success_count: int
    failure_count: int
    slow_count: int
    fast_count: int
    timeout_count: int
    http_429_count: int
    avg_latency_ms: float
    current_rate: Optional[float]
    timestamp: float
