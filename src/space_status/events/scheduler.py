"""
Refresh Scheduler
=================

Drives EventFetcher.refresh() on a fixed wall-clock cadence.

Behaviour:
    - One refresh fires immediately when run() starts
    - Subsequent refreshes fire at start + k * interval
    - Each refresh runs in its own task, so a slow refresh never delays
      or skips the next tick
    - If the loop falls behind, missed ticks are dropped rather than fired
      in a burst
    - Failures are logged and counted; there is no backoff, the next tick
      simply tries again

Example:
    scheduler = RefreshScheduler(fetcher, interval_seconds=300)
    task = asyncio.create_task(scheduler.run())

    # Later, on shutdown
    await scheduler.stop()
    await task
"""

import asyncio
import logging
from typing import Protocol, Set

from space_status.events.fetcher import RefreshResult


logger = logging.getLogger(__name__)


class Refreshable(Protocol):
    """Anything with an async refresh() returning a RefreshResult."""

    async def refresh(self) -> RefreshResult:
        ...


class RefreshScheduler:
    """
    Fixed-interval trigger for event refreshes.

    Attributes:
        fetcher: Target of the refreshes
        interval: Seconds between ticks
        ticks: Number of timer-driven refreshes fired (excludes the initial one)
        failures: Number of refreshes that did not publish
    """

    def __init__(self, fetcher: Refreshable, interval_seconds: float = 300.0) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.fetcher = fetcher
        self.interval = interval_seconds

        self.ticks: int = 0
        self.failures: int = 0

        self._running: bool = False
        self._stop_event: asyncio.Event = asyncio.Event()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> int:
        """Refreshes currently running."""
        return len(self._tasks)

    async def run(self) -> None:
        """
        Fire the initial refresh, then tick until stop() is called.

        A stop() issued before run() gets scheduled is honoured: run()
        returns without refreshing. The scheduler is single-use.
        """
        if self._stop_event.is_set():
            logger.info("RefreshScheduler stopped before start")
            return

        self._running = True

        loop = asyncio.get_running_loop()
        start = loop.time()
        logger.info(f"RefreshScheduler started, interval={self.interval:.0f}s")

        try:
            self._spawn_refresh()

            next_tick = 1
            while self._running:
                delay = start + next_tick * self.interval - loop.time()
                if delay > 0:
                    try:
                        await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                        break
                    except asyncio.TimeoutError:
                        pass

                if not self._running:
                    break

                self.ticks += 1
                self._spawn_refresh()

                elapsed_ticks = int((loop.time() - start) // self.interval)
                if elapsed_ticks > next_tick:
                    logger.warning(
                        f"Scheduler fell behind, skipping {elapsed_ticks - next_tick} tick(s)"
                    )
                next_tick = max(next_tick, elapsed_ticks) + 1
        finally:
            self._running = False
            await self._cancel_refreshes()

        logger.info("RefreshScheduler stopped")

    async def stop(self) -> None:
        """Stop ticking and cancel refreshes still in flight."""
        self._running = False
        self._stop_event.set()
        await self._cancel_refreshes()

    async def _cancel_refreshes(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _spawn_refresh(self) -> None:
        task = asyncio.create_task(self._refresh_once(), name="event_refresh")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh_once(self) -> None:
        try:
            result = await self.fetcher.refresh()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            logger.error(f"Event refresh raised: {type(e).__name__}: {e}")
            return

        if not result.ok:
            self.failures += 1

    def get_metrics(self) -> dict:
        """Get scheduler metrics for observability."""
        return {
            "running": self._running,
            "interval_seconds": self.interval,
            "ticks": self.ticks,
            "failures": self.failures,
            "in_flight": self.in_flight,
        }
