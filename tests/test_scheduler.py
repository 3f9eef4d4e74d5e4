"""
Refresh Scheduler Tests
=======================

Immediate first refresh, fixed cadence, independence from slow or failing
refreshes.
"""

import asyncio

import pytest

from space_status.events import RefreshResult, RefreshScheduler


INTERVAL = 0.2


class RecordingFetcher:
    """Fetcher stand-in recording when refresh() is entered."""

    def __init__(self, ok: bool = True, delay: float = 0.0, raises: bool = False) -> None:
        self.ok = ok
        self.delay = delay
        self.raises = raises
        self.calls = []
        self.completed = 0

    async def refresh(self) -> RefreshResult:
        self.calls.append(asyncio.get_running_loop().time())
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises:
            raise RuntimeError("boom")
        self.completed += 1
        return RefreshResult(ok=self.ok, reason="test")


async def run_for(scheduler: RefreshScheduler, seconds: float) -> None:
    task = asyncio.create_task(scheduler.run())
    await asyncio.sleep(seconds)
    await scheduler.stop()
    await asyncio.wait_for(task, timeout=1.0)


class TestCadence:

    @pytest.mark.asyncio
    async def test_initial_refresh_before_first_tick(self):
        fetcher = RecordingFetcher()
        scheduler = RefreshScheduler(fetcher, interval_seconds=INTERVAL)

        await run_for(scheduler, INTERVAL / 4)

        assert len(fetcher.calls) == 1
        assert scheduler.ticks == 0

    @pytest.mark.asyncio
    async def test_ticks_on_interval(self):
        fetcher = RecordingFetcher()
        scheduler = RefreshScheduler(fetcher, interval_seconds=INTERVAL)

        # Initial refresh plus ticks at 0.2 and 0.4
        await run_for(scheduler, INTERVAL * 2.5)

        assert len(fetcher.calls) == 3
        assert scheduler.ticks == 2
        gaps = [b - a for a, b in zip(fetcher.calls, fetcher.calls[1:])]
        for gap in gaps:
            assert gap == pytest.approx(INTERVAL, abs=0.08)

    @pytest.mark.asyncio
    async def test_failures_do_not_change_cadence(self):
        fetcher = RecordingFetcher(ok=False)
        scheduler = RefreshScheduler(fetcher, interval_seconds=INTERVAL)

        await run_for(scheduler, INTERVAL * 2.5)

        assert len(fetcher.calls) == 3
        assert scheduler.failures == 3

    @pytest.mark.asyncio
    async def test_exceptions_are_contained(self):
        fetcher = RecordingFetcher(raises=True)
        scheduler = RefreshScheduler(fetcher, interval_seconds=INTERVAL)

        await run_for(scheduler, INTERVAL * 1.5)

        assert len(fetcher.calls) == 2
        assert scheduler.failures == 2

    @pytest.mark.asyncio
    async def test_slow_refresh_does_not_block_ticks(self):
        # Each refresh outlasts two intervals
        fetcher = RecordingFetcher(delay=INTERVAL * 2)
        scheduler = RefreshScheduler(fetcher, interval_seconds=INTERVAL)

        task = asyncio.create_task(scheduler.run())
        await asyncio.sleep(INTERVAL * 2.5)

        assert len(fetcher.calls) == 3
        assert scheduler.in_flight >= 2

        await scheduler.stop()
        await asyncio.wait_for(task, timeout=1.0)
        assert scheduler.in_flight == 0


class TestLifecycle:

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            RefreshScheduler(RecordingFetcher(), interval_seconds=0)

    @pytest.mark.asyncio
    async def test_stop_ends_run(self):
        scheduler = RefreshScheduler(RecordingFetcher(), interval_seconds=60)
        task = asyncio.create_task(scheduler.run())
        await asyncio.sleep(0.01)
        assert scheduler.running is True

        await scheduler.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert scheduler.running is False
        assert task.done()

    @pytest.mark.asyncio
    async def test_metrics(self):
        scheduler = RefreshScheduler(RecordingFetcher(), interval_seconds=60)
        await run_for(scheduler, 0.01)
        metrics = scheduler.get_metrics()
        assert metrics["interval_seconds"] == 60
        assert metrics["ticks"] == 0
        assert metrics["failures"] == 0

    @pytest.mark.asyncio
    async def test_stop_before_run_is_honoured(self):
        fetcher = RecordingFetcher()
        scheduler = RefreshScheduler(fetcher, interval_seconds=INTERVAL)

        # run() has not reached its first await when stop() lands
        task = asyncio.create_task(scheduler.run())
        await scheduler.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert fetcher.calls == []
        assert scheduler.running is False
        assert scheduler.in_flight == 0

    @pytest.mark.asyncio
    async def test_cancelling_run_cancels_refreshes(self):
        fetcher = RecordingFetcher(delay=10)
        scheduler = RefreshScheduler(fetcher, interval_seconds=60)

        task = asyncio.create_task(scheduler.run())
        await asyncio.sleep(0.01)
        assert scheduler.in_flight == 1

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert scheduler.in_flight == 0
        assert scheduler.running is False
        assert fetcher.completed == 0
