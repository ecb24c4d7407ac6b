"""Tests for the HTTP fetch collaborators."""

import unittest
from unittest.mock import MagicMock, patch

import requests
from curl_cffi import CurlError

from adaptive_fetcher.base import BaseFetcher
from adaptive_fetcher.errors import FetchFailure
from adaptive_fetcher.fetchers import ImpersonatingFetcher, RequestsFetcher
from adaptive_fetcher.models import FetchOutcome, Page


def _make_response(status_code=200, text="<html></html>"):
    response = MagicMock()
    response.status_code = status_code
    response.url = "https://example.com/"
    response.headers = {"Content-Type": "text/html"}
    response.text = text
    return response


class TestBaseFetcher(unittest.TestCase):
    """Verify validation and status handling in BaseFetcher.fetch()."""

    def _dummy(self, response):
        class DummyFetcher(BaseFetcher):
            def request(self, url):
                return response

            def parse(self, url, resp):
                return "parsed"

        return DummyFetcher()

    def test_validate_raises_on_empty_url(self):
        with self.assertRaises(ValueError) as ctx:
            self._dummy(_make_response()).fetch("")
        self.assertIn("url", str(ctx.exception).lower())

    def test_returns_outcome_with_elapsed(self):
        outcome = self._dummy(_make_response()).fetch("https://example.com")
        self.assertIsInstance(outcome, FetchOutcome)
        self.assertEqual(outcome.payload, "parsed")
        self.assertGreaterEqual(outcome.elapsed_ms, 0)

    def test_any_2xx_is_success(self):
        outcome = self._dummy(_make_response(status_code=204)).fetch("https://example.com")
        self.assertEqual(outcome.payload, "parsed")

    def test_non_2xx_raises_fetch_failure(self):
        with self.assertRaises(FetchFailure) as ctx:
            self._dummy(_make_response(status_code=429)).fetch("https://example.com")
        self.assertEqual(ctx.exception.error_type, "HTTP_429")
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.url, "https://example.com")


class TestRequestsFetcher(unittest.TestCase):
    """Verify RequestsFetcher against a mocked session."""

    def setUp(self):
        self.session = MagicMock()
        self.fetcher = RequestsFetcher(timeout=5, session=self.session)

    def test_returns_page(self):
        self.session.get.return_value = _make_response(text="hello")
        outcome = self.fetcher.fetch("https://example.com")
        self.session.get.assert_called_once_with("https://example.com", timeout=5)
        self.assertIsInstance(outcome.payload, Page)
        self.assertEqual(outcome.payload.text, "hello")
        self.assertEqual(outcome.payload.final_url, "https://example.com/")
        self.assertEqual(outcome.payload.status_code, 200)

    def test_transport_error_is_wrapped(self):
        exc = requests.ConnectionError("network down")
        self.session.get.side_effect = exc
        with self.assertRaises(FetchFailure) as ctx:
            self.fetcher.fetch("https://example.com")
        self.assertEqual(ctx.exception.error_type, "ConnectionError")
        self.assertIsNone(ctx.exception.status_code)
        self.assertIs(ctx.exception.__cause__, exc)

    def test_timeout_is_wrapped(self):
        self.session.get.side_effect = requests.Timeout("slow")
        with self.assertRaises(FetchFailure) as ctx:
            self.fetcher.fetch("https://example.com")
        self.assertEqual(ctx.exception.error_type, "Timeout")

    def test_http_error_status(self):
        self.session.get.return_value = _make_response(status_code=503)
        with self.assertRaises(FetchFailure) as ctx:
            self.fetcher.fetch("https://example.com")
        self.assertEqual(ctx.exception.error_type, "HTTP_503")

    def test_close_closes_session(self):
        self.fetcher.close()
        self.session.close.assert_called_once_with()


class TestImpersonatingFetcher(unittest.TestCase):
    """Verify ImpersonatingFetcher against a mocked curl_cffi session."""

    @patch("adaptive_fetcher.fetchers.curl_requests.Session")
    def test_uses_impersonation_profile(self, session_cls):
        session = session_cls.return_value
        session.get.return_value = _make_response()
        fetcher = ImpersonatingFetcher(timeout=7, impersonate="chrome120")
        outcome = fetcher.fetch("https://example.com")
        session.get.assert_called_once_with(
            "https://example.com",
            headers=None,
            impersonate="chrome120",
            timeout=7,
        )
        session.close.assert_called_once_with()
        self.assertEqual(outcome.payload.status_code, 200)

    @patch("adaptive_fetcher.fetchers.curl_requests.Session")
    def test_curl_error_is_wrapped(self, session_cls):
        session = session_cls.return_value
        session.get.side_effect = CurlError("boom")
        with self.assertRaises(FetchFailure) as ctx:
            ImpersonatingFetcher().fetch("https://example.com")
        self.assertEqual(ctx.exception.error_type, "CurlError")
        session.close.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
