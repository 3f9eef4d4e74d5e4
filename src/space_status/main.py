"""
Space Status Main Application
=============================

FastAPI entry point for the space status service.

Startup:
    1. Load the SpaceAPI descriptor and seed the PresenceTracker
    2. Build EventExtractor + EventFetcher
    3. Start RefreshScheduler (initial refresh, then every 5 minutes)
    4. Start OccupancyFeedConsumer if the feed is enabled

Endpoints:
    GET  /api/v2.0/SpaceAPI  - SpaceAPI document with live state
    GET  /api/v2.0/status    - open / people_now_present / lastchange
    GET  /api/v2.0/events    - Upcoming events
    GET  /api/v2.0/hackers   - Plain-text occupancy (legacy hackers.txt)
    GET  /health             - Liveness probe
    GET  /metrics            - Component metrics
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from space_status.config import Settings, settings
from space_status.descriptor import initial_count, load_descriptor
from space_status.events import EventExtractor, EventFetcher, RefreshScheduler
from space_status.feed import OccupancyFeedConsumer
from space_status.models.events import EventsResponse
from space_status.presence import PresenceTracker
from space_status.store import StateStore


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("space_status.access")

API_PREFIX = "/api/v2.0"


# =============================================================================
# Component Wiring
# =============================================================================

def build_store(app_settings: Settings) -> StateStore:
    """Build tracker, fetcher and store from settings."""
    descriptor = load_descriptor(app_settings.descriptor.path)

    tracker = PresenceTracker(
        initial_count=initial_count(descriptor),
        last_change=descriptor.state.lastchange,
    )

    extractor = EventExtractor(
        base_url=app_settings.events.forum_base_url,
        validate_dates=app_settings.events.validate_dates,
    )
    fetcher = EventFetcher(
        source_url=app_settings.events.source_url,
        extractor=extractor,
        timeout=app_settings.events.fetch_timeout_seconds,
    )

    return StateStore(tracker=tracker, fetcher=fetcher, descriptor=descriptor)


async def _stop_task(task: Optional[asyncio.Task], timeout: float = 5.0) -> None:
    if task is None:
        return
    try:
        await asyncio.wait_for(task, timeout=timeout)
    except asyncio.TimeoutError:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


def create_app(
    app_settings: Settings = settings,
    store: Optional[StateStore] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        app_settings: Service configuration
        store: Prebuilt StateStore. When given, no background tasks are
            started and the store is served as-is.

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.startup_time = time.time()
        logger.info(f"Starting {app_settings.service.name} {app_settings.service.version}")

        if store is not None:
            app.state.store = store
            yield
            return

        app.state.store = build_store(app_settings)

        scheduler = RefreshScheduler(
            app.state.store.fetcher,
            interval_seconds=app_settings.events.refresh_interval_seconds,
        )
        app.state.scheduler = scheduler
        scheduler_task = asyncio.create_task(scheduler.run(), name="event_scheduler")

        feed_task: Optional[asyncio.Task] = None
        if app_settings.feed.enabled:
            consumer = OccupancyFeedConsumer(
                url=app_settings.feed.url,
                tracker=app.state.store.tracker,
                reconnect_backoff_ms=app_settings.feed.reconnect_backoff_ms,
                max_reconnect_attempts=app_settings.feed.max_reconnect_attempts,
            )
            app.state.feed_consumer = consumer
            feed_task = asyncio.create_task(consumer.run(), name="occupancy_feed")
        else:
            logger.info("Occupancy feed disabled")

        logger.info("All components started")

        yield

        logger.info("Shutting down gracefully...")

        await scheduler.stop()
        await _stop_task(scheduler_task)

        if feed_task is not None:
            await app.state.feed_consumer.stop()
            await _stop_task(feed_task)

        await app.state.store.fetcher.aclose()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Space Status",
        description="Hackerspace open/closed status and upcoming events",
        version=app_settings.service.version,
        lifespan=lifespan,
    )
    app.state.scheduler = None
    app.state.feed_consumer = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors.allow_origins,
        allow_methods=["GET"],
    )

    if app_settings.logging.access_log:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            access_logger.info(
                f"{request.method} {request.url.path} {response.status_code} "
                f"{elapsed_ms:.1f}ms"
            )
            return response

    _register_routes(app)
    return app


def get_store(request: Request) -> StateStore:
    return request.app.state.store


# =============================================================================
# HTTP Endpoints
# =============================================================================

def _register_routes(app: FastAPI) -> None:

    @app.get(f"{API_PREFIX}/SpaceAPI")
    async def space_api(store: StateStore = Depends(get_store)) -> JSONResponse:
        """SpaceAPI-compatible document."""
        return JSONResponse(store.get_space_api())

    @app.get(f"{API_PREFIX}/status")
    async def status(store: StateStore = Depends(get_store)) -> JSONResponse:
        return JSONResponse(store.get_status().model_dump(mode="json"))

    @app.get(f"{API_PREFIX}/events")
    async def events(store: StateStore = Depends(get_store)) -> JSONResponse:
        """
        Upcoming events.

        Serves the last successfully published set; a failed background
        refresh is not surfaced here.
        """
        payload = EventsResponse(events=list(store.get_events()))
        return JSONResponse(payload.model_dump(mode="json"))

    @app.get(f"{API_PREFIX}/hackers")
    async def hackers(store: StateStore = Depends(get_store)) -> PlainTextResponse:
        """Legacy route kept from hackers.txt."""
        return PlainTextResponse(str(store.people_present()))

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        """
        Liveness probe - is the process alive?

        Always returns 200 if the service is running.
        """
        return JSONResponse({
            "status": "healthy",
            "uptime_seconds": round(time.time() - request.app.state.startup_time, 1),
        })

    @app.get("/metrics")
    async def metrics(
        request: Request,
        store: StateStore = Depends(get_store),
    ) -> JSONResponse:
        """Detailed metrics for observability."""
        scheduler = request.app.state.scheduler
        consumer = request.app.state.feed_consumer

        feed_metrics = {}
        if consumer is not None:
            feed_metrics = {"connected": consumer.connected, **consumer.metrics.to_dict()}

        return JSONResponse({
            "uptime_seconds": round(time.time() - request.app.state.startup_time, 1),
            "presence": store.tracker.get_metrics(),
            "events": store.fetcher.get_metrics(),
            "scheduler": scheduler.get_metrics() if scheduler else {},
            "feed": feed_metrics,
        })


# =============================================================================
# Main Entry Point
# =============================================================================

app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run(
        "space_status.main:app",
        host=settings.server.host,
        port=settings.server.port,
        timeout_keep_alive=settings.server.timeout_keep_alive_seconds,
        access_log=False,
        reload=False,
    )


if __name__ == "__main__":
    main()
