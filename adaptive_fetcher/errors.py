from __future__ import annotations

from typing import Optional


class FetcherError(Exception):
    """Base class for all errors raised by the adaptive fetcher."""


class InvalidRateConfiguration(FetcherError, ValueError):
    """Raised when a rate, bound, factor or threshold makes no sense.

    Always raised at construction (or on an explicit set_rate call) so a
    broken configuration fails fast instead of being clamped silently."""


class AcquireCancelled(FetcherError):
    """Raised by RateLimiter.acquire() when its cancel event fires while waiting."""


class FetchFailure(FetcherError):
    """A fetch that did not produce a usable response.

    error_type follows the scraper convention: ``HTTP_<code>`` for a
    non-success status, otherwise the class name of the transport error.
    """

    def __init__(self, url: str, error_type: str, status_code: Optional[int] = None) -> None:
        self.url = url
        self.error_type = error_type
        self.status_code = status_code
        super().__init__(f"{error_type} while fetching {url}")
