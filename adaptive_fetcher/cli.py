from __future__ import annotations

import argparse
import json
import logging
import signal
from dataclasses import asdict
from typing import Any, List, Optional

from .controller import AdaptiveFetchController
from .errors import InvalidRateConfiguration
from .factory import FETCHER_KINDS, FetcherFactory
from .metrics import MetricsCollector
from .models import Page, RateControlConfig
from .runner import FetchLoop

logger = logging.getLogger("adaptive_fetcher")

DEFAULT_URL = "https://example.com"


def _load_urls(path: str) -> List[str]:
    urls: List[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            url = line.strip()
            if url and not url.startswith("#"):
                urls.append(url)
    if not urls:
        raise ValueError(f"No urls found in {path}")
    return urls


def _log_page(url: str, payload: Any) -> None:
    if isinstance(payload, Page):
        logger.debug("page url=%s status=%s bytes=%d", payload.final_url, payload.status_code, len(payload.text))


def build_parser() -> argparse.ArgumentParser:
    defaults = RateControlConfig()
    parser = argparse.ArgumentParser(
        prog="adaptive-fetcher",
        description="Fetch URLs repeatedly at a rate tuned by server latency.",
    )
    parser.add_argument("urls", nargs="*", help=f"URLs to fetch round-robin (default: {DEFAULT_URL})")
    parser.add_argument("--url-file", help="File with one URL per line")
    parser.add_argument("--fetcher", choices=FETCHER_KINDS, default="requests", help="HTTP client to use")
    parser.add_argument("--impersonate", default="chrome120", help="Browser profile for --fetcher impersonate")
    parser.add_argument("--timeout", type=float, default=20.0, help="Per-request timeout in seconds")

    parser.add_argument("--initial-rate", type=float, default=defaults.initial_rate, help="Starting permits/second")
    parser.add_argument("--min-rate", type=float, default=defaults.min_rate, help="Lower rate bound")
    parser.add_argument("--max-rate", type=float, default=defaults.max_rate, help="Upper rate bound")
    parser.add_argument("--factor", type=float, default=defaults.adjustment_factor, help="Multiplicative step")
    parser.add_argument("--slow-ms", type=int, default=defaults.slow_threshold_ms, help="Back off above this latency")
    parser.add_argument("--fast-ms", type=int, default=defaults.fast_threshold_ms, help="Speed up below this latency")

    parser.add_argument("--workers", type=int, default=1, help="Concurrent fetch loops sharing one limiter")
    parser.add_argument("--max-cycles", type=int, default=None, help="Stop after this many cycles (default: run forever)")
    parser.add_argument("--window-secs", type=int, default=60, help="Window for the final metrics summary")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = RateControlConfig(
            initial_rate=args.initial_rate,
            max_rate=args.max_rate,
            min_rate=args.min_rate,
            adjustment_factor=args.factor,
            slow_threshold_ms=args.slow_ms,
            fast_threshold_ms=args.fast_ms,
        )
    except InvalidRateConfiguration as exc:
        logger.error("invalid rate configuration: %s", exc)
        return 2

    urls = list(args.urls)
    if args.url_file:
        try:
            urls.extend(_load_urls(args.url_file))
        except (OSError, ValueError) as exc:
            logger.error("cannot read url file: %s", exc)
            return 2
    if not urls:
        urls = [DEFAULT_URL]

    factory = FetcherFactory(timeout=args.timeout, impersonate=args.impersonate)
    metrics = MetricsCollector(
        slow_threshold_ms=config.slow_threshold_ms,
        fast_threshold_ms=config.fast_threshold_ms,
    )
    controller = AdaptiveFetchController(factory.create_fetcher(args.fetcher), config=config, metrics=metrics)
    loop = FetchLoop(controller, urls, workers=args.workers, max_cycles=args.max_cycles, on_result=_log_page)

    def _handle_signal(signum: int, frame: Any) -> None:
        logger.info("received signal %s, stopping", signum)
        loop.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        summary = loop.run()
    finally:
        factory.close()

    logger.info("summary %s", json.dumps(asdict(summary)))
    logger.info("metrics %s", json.dumps(asdict(metrics.snapshot(args.window_secs))))
    return 0
