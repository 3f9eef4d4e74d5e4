"""
Presence Models
===============

Occupancy state of the space.

Core Concepts:
    - OccupancyState: Internal immutable snapshot (count, open, last_change)
    - SpaceStatus: API response shape served on /api/v2.0/status

Invariant:
    open == (count > 0) for every OccupancyState ever constructed by
    PresenceTracker. last_change is the wall-clock second of the most recent
    change of count, not of the most recent ingestion.
"""

from dataclasses import dataclass

from pydantic import BaseModel, Field


@dataclass(frozen=True, slots=True)
class OccupancyState:
    """
    Immutable occupancy snapshot.

    Instances are replaced wholesale on every ingestion, so a reader holding
    one never sees a count from one ingestion paired with a timestamp from
    another.

    Attributes:
        count: People currently present (>= 0)
        open: Whether the space is open (count > 0)
        last_change: UNIX seconds of the last count change
    """

    count: int
    open: bool
    last_change: int

    @classmethod
    def from_count(cls, count: int, last_change: int) -> "OccupancyState":
        """Build a state with `open` derived from `count`."""
        return cls(count=count, open=count > 0, last_change=last_change)


class SpaceStatus(BaseModel):
    """Status payload for the /status route."""

    open: bool = Field(..., description="Whether the space is open")
    people_now_present: int = Field(..., ge=0, description="Current occupancy")
    lastchange: int = Field(..., ge=0, description="UNIX seconds of last change")

    @classmethod
    def from_state(cls, state: OccupancyState) -> "SpaceStatus":
        return cls(
            open=state.open,
            people_now_present=state.count,
            lastchange=state.last_change,
        )
