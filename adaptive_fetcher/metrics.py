from __future__ import annotations

import time
from collections import deque
from dataclasses import asdict
from threading import Lock
from typing import Deque, Dict, List, Optional

from .models import FetchRecord, MetricsSnapshot


class MetricsCollector:
    """Thread-safe collector for fetch cycle outcomes.

    Records one FetchRecord per cycle and produces MetricsSnapshot
    aggregates over a sliding time window. Latency thresholds are only used
    to count slow/fast samples; they do not influence the rate."""

    def __init__(self, slow_threshold_ms: int = 5000, fast_threshold_ms: int = 200, maxlen: int = 10000) -> None:
        self._lock = Lock()
        self._events: Deque[tuple[float, FetchRecord]] = deque(maxlen=maxlen)
        self._slow_ms = slow_threshold_ms
        self._fast_ms = fast_threshold_ms

    def record_result(self, record: FetchRecord) -> None:
        """Record a fetch cycle outcome with the current timestamp."""
        with self._lock:
            self._events.append((time.time(), record))

    def snapshot(self, window_secs: int) -> MetricsSnapshot:
        """Return aggregated metrics for cycles within the last window_secs seconds."""
        now = time.time()
        cutoff = now - window_secs
        with self._lock:
            events: List[FetchRecord] = [e for ts, e in self._events if ts >= cutoff]
        total = len(events)
        success_count = sum(1 for e in events if e.success)
        latencies = [e.latency_ms for e in events if e.latency_ms is not None]
        slow_count = sum(1 for ms in latencies if ms > self._slow_ms)
        fast_count = sum(1 for ms in latencies if ms < self._fast_ms)
        timeout_count = sum(1 for e in events if e.error_type and "Timeout" in e.error_type)
        http_429_count = sum(1 for e in events if e.status_code == 429)
        avg_latency_ms = (sum(latencies) / len(latencies)) if latencies else 0.0
        current_rate: Optional[float] = events[-1].rate if events else None

        return MetricsSnapshot(
            window_secs=window_secs,
            total_requests=total,
            success_count=success_count,
            failure_count=total - success_count,
            slow_count=slow_count,
            fast_count=fast_count,
            timeout_count=timeout_count,
            http_429_count=http_429_count,
            avg_latency_ms=avg_latency_ms,
            current_rate=current_rate,
            timestamp=now,
        )

    def export_json(self) -> List[Dict]:
        """Export all recorded cycles as a list of dictionaries."""
        with self._lock:
            return [{"timestamp": ts, **asdict(e)} for ts, e in self._events]
