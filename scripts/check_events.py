#!/usr/bin/env python3
"""
Event Source Check Script
=========================

Standalone script to exercise the forum event pipeline against a live forum.

This script:
    1. Runs one refresh against the configured forum URL
    2. Prints every extracted event
    3. Optionally keeps refreshing on an interval for a fixed duration
    4. Reports a final summary

Usage:
    python scripts/check_events.py
    python scripts/check_events.py --url https://community.lambdaspace.gr/c/events.json
    python scripts/check_events.py --duration 60 --interval 10
"""

import argparse
import asyncio
import logging
import os
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from space_status.events import EventExtractor, EventFetcher, RefreshScheduler


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def run_check(
    url: str,
    base_url: str,
    duration: float,
    interval: float,
    validate_dates: bool,
) -> dict:
    """
    Run the event source check.

    Args:
        url: Forum category JSON URL
        base_url: Forum root for topic links
        duration: Seconds to keep refreshing (0 = single refresh)
        interval: Seconds between refreshes
        validate_dates: Drop calendar-invalid dates

    Returns:
        Fetcher metrics dict
    """
    logger.info("=" * 60)
    logger.info(f"Event source: {url}")
    logger.info(f"Duration: {duration}s, interval: {interval}s")
    logger.info("=" * 60)

    fetcher = EventFetcher(
        source_url=url,
        extractor=EventExtractor(base_url, validate_dates=validate_dates),
    )

    try:
        if duration > 0:
            scheduler = RefreshScheduler(fetcher, interval_seconds=interval)
            task = asyncio.create_task(scheduler.run())
            try:
                await asyncio.sleep(duration)
            finally:
                await scheduler.stop()
                await task
        else:
            result = await fetcher.refresh()
            logger.info(f"Refresh: ok={result.ok} reason={result.reason}")
    finally:
        await fetcher.aclose()

    for event in fetcher.snapshot():
        end = f"-{event.end}" if event.end else ""
        logger.info(f"  {event.date} {event.begin}{end}  {event.title}  <{event.url}>")

    metrics = fetcher.get_metrics()
    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    for key, value in metrics.items():
        logger.info(f"{key}: {value}")
    return metrics


def main():
    parser = argparse.ArgumentParser(description="Check the forum event source")
    parser.add_argument(
        "--url",
        type=str,
        default=os.environ.get("SPACE_EVENTS_URL", "https://community.lambdaspace.gr/c/events.json"),
        help="Forum category JSON URL",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=os.environ.get("SPACE_FORUM_BASE_URL", "https://community.lambdaspace.gr"),
        help="Forum root used for topic links",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Seconds to keep refreshing (default: single refresh)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=300,
        help="Seconds between refreshes (default: 300)",
    )
    parser.add_argument(
        "--validate-dates",
        action="store_true",
        help="Drop titles whose date is not a real calendar date",
    )

    args = parser.parse_args()

    metrics = asyncio.run(run_check(
        url=args.url,
        base_url=args.base_url,
        duration=args.duration,
        interval=args.interval,
        validate_dates=args.validate_dates,
    ))

    sys.exit(0 if metrics["published_events"] > 0 else 1)


if __name__ == "__main__":
    main()
