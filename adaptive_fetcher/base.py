from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any

from .errors import FetchFailure
from .models import FetchOutcome


class BaseFetcher(ABC):
    """Abstract base class defining the fetch collaborator pipeline.

    fetch() validates the URL, times the network round trip, rejects any
    non-2xx status and hands the response to parse(). Failures surface as
    FetchFailure; the timing covers only the request itself, not parsing.
    """

    def fetch(self, url: str) -> FetchOutcome:
        self.validate(url)
        start = time.monotonic()
        response = self.request(url)
        elapsed_ms = max(0, int((time.monotonic() - start) * 1000))

        status_code = getattr(response, "status_code", None)
        if status_code is None or not 200 <= int(status_code) < 300:
            raise FetchFailure(url, f"HTTP_{status_code}", status_code=status_code)

        return FetchOutcome(payload=self.parse(url, response), elapsed_ms=elapsed_ms)

    def validate(self, url: str) -> None:
        if not url:
            raise ValueError("url is required")

    @abstractmethod
    def request(self, url: str) -> Any:
        """Perform the HTTP request, raising FetchFailure on transport errors."""
        ...

    @abstractmethod
    def parse(self, url: str, response: Any) -> Any:
        ...

    def close(self) -> None:
        """Release any pooled connections held by the fetcher."""
