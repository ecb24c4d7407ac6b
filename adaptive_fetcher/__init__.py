"""Adaptive-rate web fetcher.

Fetches documents over HTTP while a feedback loop tunes the request rate
from observed round-trip latency.

Key modules:
    rate_limiter -- RateLimiter issuing permits at an adjustable rate
    controller   -- AdaptiveFetchController running one fetch cycle per call
    strategies   -- RateAdjustmentStrategy and the multiplicative latency rule
    base         -- BaseFetcher abstract fetch collaborator
    fetchers     -- RequestsFetcher, ImpersonatingFetcher implementations
    factory      -- FetcherFactory for creating fetchers by name
    runner       -- FetchLoop, the cancellation-aware driver loop
    metrics      -- MetricsCollector for runtime statistics
    models       -- RateControlConfig, FetchOutcome, Page and metrics dataclasses
    errors       -- FetchFailure, InvalidRateConfiguration, AcquireCancelled
    cli          -- command line entry point
"""
from __future__ import annotations

from .controller import AdaptiveFetchController
from .errors import AcquireCancelled, FetcherError, FetchFailure, InvalidRateConfiguration
from .models import FetchOutcome, RateControlConfig
from .rate_limiter import RateLimiter

__all__ = [
    "AcquireCancelled",
    "AdaptiveFetchController",
    "FetchFailure",
    "FetchOutcome",
    "FetcherError",
    "InvalidRateConfiguration",
    "RateControlConfig",
    "RateLimiter",
]
