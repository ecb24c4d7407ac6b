from __future__ import annotations

from typing import Dict, Optional

from .base import BaseFetcher
from .fetchers import ImpersonatingFetcher, RequestsFetcher

FETCHER_KINDS = ("requests", "impersonate")


class FetcherFactory:
    """Factory for creating fetch collaborators by name.

    - "requests": RequestsFetcher, one shared session (cached by default).
    - "impersonate": ImpersonatingFetcher, curl_cffi browser impersonation.
    """

    def __init__(
        self,
        timeout: float = 20,
        headers: Optional[Dict[str, str]] = None,
        impersonate: str = "chrome120",
        cache: bool = True,
    ) -> None:
        self._timeout = timeout
        self._headers = headers
        self._impersonate = impersonate
        self._cache_enabled = cache
        self._cache: Dict[str, BaseFetcher] = {}

    def create_fetcher(self, kind: str) -> BaseFetcher:
        if self._cache_enabled and kind in self._cache:
            return self._cache[kind]

        if kind == "requests":
            fetcher: BaseFetcher = RequestsFetcher(timeout=self._timeout, headers=self._headers)
        elif kind == "impersonate":
            fetcher = ImpersonatingFetcher(
                timeout=self._timeout,
                headers=self._headers,
                impersonate=self._impersonate,
            )
        else:
            raise ValueError(f"Unknown fetcher kind: {kind}")

        if self._cache_enabled:
            self._cache[kind] = fetcher
        return fetcher

    def close(self) -> None:
        for fetcher in self._cache.values():
            fetcher.close()
        self._cache.clear()
