"""
State Store
===========

Read-side aggregate served by the HTTP layer.

StateStore holds no mutable state of its own. Occupancy is read from the
PresenceTracker and events from the EventFetcher, each through its own
synchronized accessor, so a reader of one never waits on a writer of the
other.
"""

from typing import Tuple

from space_status.events.fetcher import EventFetcher
from space_status.models.descriptor import PeopleNowPresent, SpaceDescriptor
from space_status.models.events import EventRecord
from space_status.models.presence import OccupancyState, SpaceStatus
from space_status.presence.tracker import PresenceTracker


class StateStore:
    """
    Consistent, non-blocking reads of presence and events.

    Example:
        store = StateStore(tracker, fetcher, descriptor)

        status = store.get_status()
        events = store.get_events()
    """

    def __init__(
        self,
        tracker: PresenceTracker,
        fetcher: EventFetcher,
        descriptor: SpaceDescriptor,
    ) -> None:
        self.tracker = tracker
        self.fetcher = fetcher
        self.descriptor = descriptor

    def get_occupancy(self) -> OccupancyState:
        return self.tracker.snapshot()

    def get_events(self) -> Tuple[EventRecord, ...]:
        return self.fetcher.snapshot()

    def get_status(self) -> SpaceStatus:
        return SpaceStatus.from_state(self.get_occupancy())

    def people_present(self) -> int:
        return self.get_occupancy().count

    def get_space_api(self) -> dict:
        """
        SpaceAPI document with live state.

        state.open, state.lastchange and the first people_now_present
        sensor come from a single occupancy snapshot.
        """
        state = self.get_occupancy()

        sensors = list(self.descriptor.sensors.people_now_present)
        live_sensor = PeopleNowPresent(value=state.count)
        if sensors:
            sensors[0] = live_sensor
        else:
            sensors = [live_sensor]

        document = self.descriptor.model_copy(
            update={
                "state": self.descriptor.state.model_copy(
                    update={"open": state.open, "lastchange": state.last_change}
                ),
                "sensors": self.descriptor.sensors.model_copy(
                    update={"people_now_present": sensors}
                ),
            }
        )
        return document.model_dump(mode="json")
