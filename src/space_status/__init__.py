"""
Space Status
============

Live open/closed status and upcoming events for a hackerspace.

This package tracks occupancy pushed by an external feed, scrapes event
announcements from the community forum, and serves both over a small
SpaceAPI-compatible HTTP API.

Components:
    - presence: Occupancy state (count, open, last change)
    - events: Forum title extraction, fetching and scheduled refresh
    - feed: WebSocket transport for occupancy counts
    - store: Read-side aggregate for the HTTP layer

Example:
    from space_status.config import settings
    from space_status.main import create_app

    app = create_app(settings)
"""

__version__ = "2.0.0"

__all__ = [
    "__version__",
]
