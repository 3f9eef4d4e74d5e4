"""
Event Fetcher
=============

Retrieves the forum topic list and publishes extracted events.

This module provides the EventFetcher class which:
    - GETs the Discourse category JSON with a bounded timeout
    - Validates the payload against TopicListPayload
    - Runs EventExtractor over the topics
    - Swaps in the new event set only when extraction produced something

Design Rules:
    - refresh() never raises for network or payload problems; it returns
      a RefreshResult and logs the reason
    - An empty extraction never replaces a published set (last known good)
    - The published set is an immutable tuple swapped by reference, so a
      reader keeps a stable snapshot even if a refresh lands mid-read
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx
from pydantic import ValidationError

from space_status.events.extractor import EventExtractor
from space_status.models.events import EventRecord, TopicListPayload


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RefreshResult:
    """
    Outcome of a single refresh.

    Attributes:
        ok: True if a new event set was published
        reason: Short description of the outcome
        event_count: Number of events extracted by this refresh
    """

    ok: bool
    reason: str
    event_count: int = 0


class EventFetcherMetrics:
    """Metrics for EventFetcher observability."""

    __slots__ = (
        "refresh_attempts",
        "refresh_successes",
        "refresh_failures",
        "last_success",
        "last_failure_reason",
    )

    def __init__(self) -> None:
        self.refresh_attempts: int = 0
        self.refresh_successes: int = 0
        self.refresh_failures: int = 0
        self.last_success: int = 0
        self.last_failure_reason: str = ""

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "refresh_attempts": self.refresh_attempts,
            "refresh_successes": self.refresh_successes,
            "refresh_failures": self.refresh_failures,
            "last_success": self.last_success,
            "last_failure_reason": self.last_failure_reason,
        }


class EventFetcher:
    """
    Owner of the published event set.

    Attributes:
        source_url: Forum category JSON URL
        extractor: Title parser
        timeout: Request timeout in seconds
        metrics: Refresh counters
        last_result: Outcome of the most recent refresh, if any

    Example:
        fetcher = EventFetcher(
            source_url="https://community.lambdaspace.gr/c/events.json",
            extractor=EventExtractor("https://community.lambdaspace.gr"),
        )

        result = await fetcher.refresh()
        if not result.ok:
            print(f"Keeping previous events: {result.reason}")
        events = fetcher.snapshot()
    """

    def __init__(
        self,
        source_url: str,
        extractor: EventExtractor,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize event fetcher.

        Args:
            source_url: Forum category JSON URL
            extractor: Title parser
            timeout: Request timeout in seconds
            client: Shared AsyncClient. When None, the fetcher creates and
                owns one; aclose() closes it.
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self.source_url = source_url
        self.extractor = extractor
        self.timeout = timeout

        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

        self._lock = threading.Lock()
        self._events: Tuple[EventRecord, ...] = ()
        self.last_result: Optional[RefreshResult] = None
        self.metrics = EventFetcherMetrics()

    @property
    def events(self) -> Tuple[EventRecord, ...]:
        """Currently published events."""
        return self.snapshot()

    def snapshot(self) -> Tuple[EventRecord, ...]:
        """Return the published event set. The tuple is never mutated."""
        with self._lock:
            return self._events

    async def refresh(self) -> RefreshResult:
        """
        Fetch, extract, and publish events.

        Returns:
            RefreshResult. ok is False on any fetch/parse failure or when
            no events were extracted; the published set is unchanged then.
        """
        self.metrics.refresh_attempts += 1

        try:
            payload = await self._fetch_topics()
        except httpx.HTTPStatusError as e:
            return self._fail(f"HTTP {e.response.status_code} from {self.source_url}")
        except httpx.HTTPError as e:
            return self._fail(f"Request to {self.source_url} failed: {type(e).__name__}: {e}")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return self._fail(f"Malformed JSON from {self.source_url}: {e}")
        except ValidationError as e:
            return self._fail(
                f"Unexpected payload from {self.source_url}: {e.error_count()} validation errors"
            )

        events = self.extractor.parse(payload.topic_list.topics)
        if not events:
            return self._fail(
                f"No events extracted from {len(payload.topic_list.topics)} topics",
                level=logging.INFO,
            )

        published = tuple(events)
        with self._lock:
            self._events = published

        self.metrics.refresh_successes += 1
        self.metrics.last_success = int(time.time())
        result = RefreshResult(ok=True, reason="published", event_count=len(published))
        self.last_result = result
        logger.info(f"Published {len(published)} events")
        return result

    async def _fetch_topics(self) -> TopicListPayload:
        response = await self._client.get(self.source_url, timeout=self.timeout)
        response.raise_for_status()
        data = json.loads(response.content)
        return TopicListPayload.model_validate(data)

    def _fail(self, reason: str, level: int = logging.WARNING) -> RefreshResult:
        self.metrics.refresh_failures += 1
        self.metrics.last_failure_reason = reason
        result = RefreshResult(ok=False, reason=reason)
        self.last_result = result
        logger.log(level, f"Event refresh failed, keeping previous events: {reason}")
        return result

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    def get_metrics(self) -> dict:
        """Get fetcher metrics for observability."""
        return {
            "published_events": len(self.snapshot()),
            **self.metrics.to_dict(),
        }
