from __future__ import annotations

from typing import Any, Dict, Optional

import requests
from curl_cffi import CurlError
from curl_cffi import requests as curl_requests

from .base import BaseFetcher
from .errors import FetchFailure
from .models import Page

DEFAULT_HEADERS = {
    "User-Agent": "adaptive-fetcher/0.1",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def _to_page(url: str, response: Any) -> Page:
    return Page(
        url=url,
        final_url=str(getattr(response, "url", None) or url),
        status_code=int(response.status_code),
        headers=dict(getattr(response, "headers", None) or {}),
        text=getattr(response, "text", "") or "",
    )


class RequestsFetcher(BaseFetcher):
    """Plain GET fetcher on a shared requests.Session.

    The session is safe to share between loop workers for simple GETs; it
    keeps connections to the target alive across cycles."""

    def __init__(
        self,
        timeout: float = 20,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(headers or DEFAULT_HEADERS)

    def request(self, url: str) -> Any:
        try:
            return self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise FetchFailure(url, type(exc).__name__) from exc

    def parse(self, url: str, response: Any) -> Page:
        return _to_page(url, response)

    def close(self) -> None:
        self._session.close()


class ImpersonatingFetcher(BaseFetcher):
    """GET fetcher that impersonates a browser TLS fingerprint via curl_cffi.

    Useful for targets that reject plain python clients. A fresh
    curl_cffi session is opened per request to avoid sharing curl handles
    across threads."""

    def __init__(
        self,
        timeout: float = 20,
        headers: Optional[Dict[str, str]] = None,
        impersonate: str = "chrome120",
    ) -> None:
        self._timeout = timeout
        self._headers = headers
        self._impersonate = impersonate

    def request(self, url: str) -> Any:
        session = curl_requests.Session()
        try:
            return session.get(
                url,
                headers=self._headers,
                impersonate=self._impersonate,
                timeout=self._timeout,
            )
        except CurlError as exc:
            raise FetchFailure(url, type(exc).__name__) from exc
        finally:
            session.close()

    def parse(self, url: str, response: Any) -> Page:
        return _to_page(url, response)
