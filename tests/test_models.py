"""Tests for data model classes."""

import unittest

from adaptive_fetcher.errors import InvalidRateConfiguration
from adaptive_fetcher.models import FetchOutcome, MetricsSnapshot, Page, RateControlConfig


class TestRateControlConfig(unittest.TestCase):
    """Verify configuration defaults, validation and immutability."""

    def test_defaults(self):
        config = RateControlConfig()
        self.assertEqual(config.initial_rate, 10.0)
        self.assertEqual(config.max_rate, 20.0)
        self.assertEqual(config.min_rate, 1.0)
        self.assertEqual(config.adjustment_factor, 0.1)
        self.assertEqual(config.slow_threshold_ms, 5000)
        self.assertEqual(config.fast_threshold_ms, 200)

    def test_config_is_immutable(self):
        config = RateControlConfig()
        with self.assertRaises(AttributeError):
            config.max_rate = 50.0

    def test_min_above_max_fails_fast(self):
        with self.assertRaises(InvalidRateConfiguration):
            RateControlConfig(min_rate=5.0, max_rate=1.0, initial_rate=3.0)

    def test_non_positive_rates_fail_fast(self):
        for kwargs in (
            {"min_rate": 0.0},
            {"initial_rate": -1.0},
            {"max_rate": float("inf")},
        ):
            with self.assertRaises(InvalidRateConfiguration):
                RateControlConfig(**kwargs)

    def test_initial_rate_outside_bounds_fails_fast(self):
        with self.assertRaises(InvalidRateConfiguration):
            RateControlConfig(initial_rate=25.0)

    def test_invalid_factor_and_thresholds(self):
        for kwargs in (
            {"adjustment_factor": 0.0},
            {"adjustment_factor": 1.0},
            {"fast_threshold_ms": -1},
            {"fast_threshold_ms": 6000},
        ):
            with self.assertRaises(ValueError):
                RateControlConfig(**kwargs)

    def test_clamp(self):
        config = RateControlConfig()
        self.assertEqual(config.clamp(0.5), 1.0)
        self.assertEqual(config.clamp(25.0), 20.0)
        self.assertEqual(config.clamp(12.5), 12.5)


class TestOutcomeModels(unittest.TestCase):
    """Verify the small per-cycle dataclasses."""

    def test_fetch_outcome(self):
        outcome = FetchOutcome(payload=b"raw", elapsed_ms=0)
        self.assertEqual(outcome.payload, b"raw")
        self.assertEqual(outcome.elapsed_ms, 0)

    def test_page_defaults(self):
        page = Page(url="https://example.com", final_url="https://example.com/", status_code=200)
        self.assertEqual(page.headers, {})
        self.assertEqual(page.text, "")

    def test_create_snapshot(self):
        snap = MetricsSnapshot(
            window_secs=30,
            total_requests=10,
            success_count=9,
            failure_count=1,
            slow_count=2,
            fast_count=5,
            timeout_count=1,
            http_429_count=0,
            avg_latency_ms=320.5,
            current_rate=12.0,
            timestamp=1000000.0,
        )
        self.assertEqual(snap.total_requests, 10)
        self.assertEqual(snap.current_rate, 12.0)


if __name__ == "__main__":
    unittest.main()
