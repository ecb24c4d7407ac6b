from __future__ import annotations

import math
import threading
import time
from typing import Callable, Optional, Tuple

from .errors import AcquireCancelled, InvalidRateConfiguration


class RateLimiter:
    """Thread-safe permit issuer running at an adjustable rate (permits per second).

    Permit n+1 is issued no earlier than issue(n) + 1/rate, using the rate in
    effect when the permit is requested. acquire() reserves its slot under
    the lock and waits outside it, so set_rate()/get_rate() never queue
    behind a sleeping caller. No burst credit is accumulated while idle."""

    def __init__(self, rate: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._check(rate)
        self._rate = float(rate)
        self._clock = clock
        self._lock = threading.Lock()
        self._last_issued: Optional[float] = None

    @staticmethod
    def _check(rate: float) -> None:
        if not isinstance(rate, (int, float)) or not math.isfinite(rate) or rate <= 0:
            raise InvalidRateConfiguration(f"rate must be a finite number > 0, got {rate!r}")

    def _reserve(self, now: float) -> Tuple[float, Optional[float]]:
        # caller holds the lock
        previous = self._last_issued
        if previous is None:
            slot = now
        else:
            slot = max(now, previous + 1.0 / self._rate)
        self._last_issued = slot
        return slot, previous

    def acquire(self, cancel: Optional[threading.Event] = None) -> float:
        """Block until one permit is available; return the seconds spent waiting."""
        with self._lock:
            now = self._clock()
            slot, previous = self._reserve(now)

        delay = slot - now
        if delay <= 0:
            return 0.0
        if cancel is None:
            time.sleep(delay)
            return delay
        if cancel.wait(delay):
            with self._lock:
                # hand the slot back unless a later permit was already reserved
                if self._last_issued == slot:
                    self._last_issued = previous
            raise AcquireCancelled("permit wait cancelled")
        return delay

    def try_acquire(self, timeout: float = 0.0) -> bool:
        """Take a permit only if it can be issued within timeout seconds."""
        with self._lock:
            now = self._clock()
            if self._last_issued is not None:
                earliest = self._last_issued + 1.0 / self._rate
                if earliest - now > timeout:
                    return False
            slot, _ = self._reserve(now)
        delay = slot - now
        if delay > 0:
            time.sleep(delay)
        return True

    def set_rate(self, rate: float) -> None:
        """Change the issuance rate for permits requested from now on."""
        self._check(rate)
        with self._lock:
            self._rate = float(rate)

    def get_rate(self) -> float:
        with self._lock:
            return self._rate

    @property
    def rate(self) -> float:
        return self.get_rate()

    def update_rate(self, fn: Callable[[float], float]) -> Tuple[float, float]:
        """Atomically replace the rate with fn(current_rate); return (old, new)."""
        with self._lock:
            old_rate = self._rate
            new_rate = fn(old_rate)
            self._check(new_rate)
            self._rate = float(new_rate)
            return old_rate, self._rate
