"""
Presence Module
===============

Live occupancy state of the space.

Components:
    - PresenceTracker: Thread-safe owner of count / open / last_change
    - InvalidOccupancyError: Raised for negative or non-integer counts
"""

from space_status.presence.tracker import InvalidOccupancyError, PresenceTracker

__all__ = [
    "PresenceTracker",
    "InvalidOccupancyError",
]
