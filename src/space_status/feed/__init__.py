"""
Feed Module
===========

Transport for occupancy signals.

    - OccupancyFeedConsumer: WebSocket client feeding PresenceTracker
    - parse_count: Message decoder (plain integer or JSON object)
"""

from space_status.feed.consumer import (
    FeedMessageError,
    OccupancyFeedConsumer,
    OccupancyFeedMetrics,
    parse_count,
)


__all__ = [
    "FeedMessageError",
    "OccupancyFeedConsumer",
    "OccupancyFeedMetrics",
    "parse_count",
]
