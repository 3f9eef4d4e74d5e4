"""
Presence Tracker
================

Owns the occupancy state of the space.

This tracker:
    - Takes integer occupancy counts from the occupancy feed
    - Derives open/closed from the count
    - Stamps last_change only when the count actually changes
    - Serves consistent snapshots to any number of concurrent readers

Concurrency:
    State is a single frozen OccupancyState replaced under a threading.Lock.
    The lock is held only for the compare-and-swap in ingest() and the
    reference read in snapshot(), so it is safe to call from asyncio tasks
    and OS threads alike and never blocks for long.
"""

import logging
import threading
import time
from typing import Callable

from space_status.models.presence import OccupancyState


logger = logging.getLogger(__name__)


class InvalidOccupancyError(ValueError):
    """Raised when an occupancy count is negative or not an integer."""


class PresenceTracker:
    """
    Thread-safe owner of OccupancyState.

    Attributes:
        ingest_count: Number of accepted ingestions
        rejected_count: Number of rejected ingestions
        change_count: Number of ingestions that changed the count

    Example:
        tracker = PresenceTracker(initial_count=0)

        tracker.ingest(3)
        state = tracker.snapshot()
        print(state.count, state.open, state.last_change)
    """

    def __init__(
        self,
        initial_count: int = 0,
        last_change: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize presence tracker.

        Args:
            initial_count: Seed count from the static descriptor
            last_change: Seed change timestamp from the static descriptor
            clock: Wall-clock source returning UNIX seconds
        """
        self._validate(initial_count)
        if last_change < 0:
            raise ValueError("last_change must be >= 0")

        self._clock = clock
        self._lock = threading.Lock()
        self._state = OccupancyState.from_count(initial_count, last_change)

        self.ingest_count: int = 0
        self.rejected_count: int = 0
        self.change_count: int = 0

        logger.info(
            f"PresenceTracker initialized: count={initial_count}, "
            f"open={self._state.open}"
        )

    @staticmethod
    def _validate(count: object) -> int:
        # bool is an int subclass but never a headcount
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidOccupancyError(f"Occupancy must be an integer, got {count!r}")
        if count < 0:
            raise InvalidOccupancyError(f"Occupancy must be >= 0, got {count}")
        return count

    def ingest(self, count: int) -> OccupancyState:
        """
        Record a new occupancy count.

        Repeating the current count leaves last_change untouched.

        Args:
            count: People currently present

        Returns:
            The OccupancyState after this ingestion

        Raises:
            InvalidOccupancyError: If count is negative or not an integer.
                State is left unchanged.
        """
        try:
            self._validate(count)
        except InvalidOccupancyError:
            with self._lock:
                self.rejected_count += 1
            raise

        with self._lock:
            previous = self._state
            self.ingest_count += 1
            if count == previous.count:
                return previous

            state = OccupancyState.from_count(count, int(self._clock()))
            self._state = state
            self.change_count += 1

        if state.open != previous.open:
            logger.info(
                f"Space is now {'open' if state.open else 'closed'} "
                f"(people_now_present={count})"
            )
        else:
            logger.debug(f"Occupancy changed: {previous.count} -> {count}")
        return state

    def snapshot(self) -> OccupancyState:
        """Return the current occupancy state."""
        with self._lock:
            return self._state

    def get_metrics(self) -> dict:
        """Get tracker metrics for observability."""
        with self._lock:
            state = self._state
            return {
                "people_now_present": state.count,
                "open": state.open,
                "lastchange": state.last_change,
                "ingest_count": self.ingest_count,
                "rejected_count": self.rejected_count,
                "change_count": self.change_count,
            }
