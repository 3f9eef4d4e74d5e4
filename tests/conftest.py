"""
Test Configuration
==================

Pytest fixtures and test configuration for the space status service.
"""

import json

import httpx
import pytest

from space_status.events import EventExtractor, EventFetcher


FORUM_BASE = "https://forum.example.org"
EVENTS_URL = f"{FORUM_BASE}/c/events.json"


class FakeClock:
    """Settable wall clock for PresenceTracker."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_topics():
    """Forum topics mixing valid and malformed titles."""
    return [
        {"id": 42, "title": "12/05/2024 18:00 - 20:00 Lockpicking Workshop", "slug": "lockpicking-night"},
        {"id": 43, "title": "Open Social Night", "slug": "open-social-night"},
        {"id": 44, "title": "13/05/2024 19:30 General Meetup", "slug": "general-meetup", "posts_count": 7},
    ]


@pytest.fixture
def sample_payload(sample_topics):
    """Discourse category listing."""
    return {"users": [], "topic_list": {"can_create_topic": False, "topics": sample_topics}}


@pytest.fixture
def sample_descriptor():
    """Minimal SpaceAPI descriptor."""
    return {
        "api": "0.13",
        "space": "TestSpace",
        "url": "https://space.example.org",
        "location": {"address": "Somewhere 1", "lon": 22.9, "lat": 40.6},
        "state": {"open": False, "lastchange": 1600000000},
        "contact": {"email": "hello@example.org"},
        "sensors": {"people_now_present": [{"value": 2}]},
        "cache": {"schedule": "m.05"},
    }


@pytest.fixture
def extractor():
    return EventExtractor(FORUM_BASE)


def json_handler(payload, status_code: int = 200):
    """MockTransport handler returning a fixed JSON payload."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=json.dumps(payload).encode())

    return handler


@pytest.fixture
def make_fetcher(extractor):
    """Build an EventFetcher whose HTTP calls go to a MockTransport handler."""

    def _make(handler) -> EventFetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return EventFetcher(EVENTS_URL, extractor, timeout=10.0, client=client)

    return _make
