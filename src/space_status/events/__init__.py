"""
Events Module
=============

Upcoming events scraped from the community forum.

Components:
    - EventExtractor: Parses "DD/MM/YYYY HH:MM [- HH:MM] title" topic titles
    - EventFetcher: Fetches the topic list and publishes extracted events
    - RefreshScheduler: Runs EventFetcher.refresh() on a fixed interval

Example:
    from space_status.events import EventExtractor, EventFetcher, RefreshScheduler

    fetcher = EventFetcher(
        source_url="https://community.lambdaspace.gr/c/events.json",
        extractor=EventExtractor("https://community.lambdaspace.gr"),
    )
    scheduler = RefreshScheduler(fetcher, interval_seconds=300)
    task = asyncio.create_task(scheduler.run())
"""

from space_status.events.extractor import EventExtractor, ParsedTitle
from space_status.events.fetcher import EventFetcher, EventFetcherMetrics, RefreshResult
from space_status.events.scheduler import RefreshScheduler


__all__ = [
    "EventExtractor",
    "ParsedTitle",
    "EventFetcher",
    "EventFetcherMetrics",
    "RefreshResult",
    "RefreshScheduler",
]
