"""
Data Models
===========

Models for the space status service.

This module re-exports all data models for convenient access.

Models:
    Presence:
        - OccupancyState: Immutable occupancy snapshot
        - SpaceStatus: /status response

    Events:
        - TopicSourceRecord: Raw forum topic (id, title, slug)
        - TopicListPayload: Forum category response
        - EventRecord: Extracted calendar entry
        - EventsResponse: /events response

    Descriptor:
        - SpaceDescriptor: SpaceAPI document
"""

from space_status.models.presence import OccupancyState, SpaceStatus
from space_status.models.events import (
    EventRecord,
    EventsResponse,
    TopicList,
    TopicListPayload,
    TopicSourceRecord,
)
from space_status.models.descriptor import PeopleNowPresent, SpaceDescriptor

__all__ = [
    # Presence
    "OccupancyState",
    "SpaceStatus",
    # Events
    "TopicSourceRecord",
    "TopicList",
    "TopicListPayload",
    "EventRecord",
    "EventsResponse",
    # Descriptor
    "PeopleNowPresent",
    "SpaceDescriptor",
]
