"""
Occupancy Feed Consumer
=======================

WebSocket client that pushes occupancy counts into the PresenceTracker.

This module provides the OccupancyFeedConsumer class which:
    - Connects to the occupancy feed WebSocket
    - Parses each message into an integer count
    - Hands the count to PresenceTracker.ingest()
    - Handles reconnection with a fixed backoff

Accepted message forms:
    3
    "3"
    {"count": 3}
    {"people_now_present": 3}

Design Rules:
    - Messages are applied in arrival order, no replay
    - Unparseable or rejected values are logged and counted, never fatal
    - Reconnects automatically on disconnect
    - Exposes metrics for health monitoring
"""

import asyncio
import json
import logging
from typing import Optional

import websockets
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedError,
    ConnectionClosedOK,
)

from space_status.presence.tracker import InvalidOccupancyError, PresenceTracker


logger = logging.getLogger(__name__)


COUNT_KEYS = ("count", "people_now_present")


class FeedMessageError(ValueError):
    """Raised when a feed message does not carry an integer count."""


def parse_count(raw) -> int:
    """
    Extract an occupancy count from a raw feed message.

    Args:
        raw: Text or bytes received from the feed

    Returns:
        The integer count (sign is not checked here)

    Raises:
        FeedMessageError: If no integer count can be recovered
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FeedMessageError(f"Feed message is not UTF-8: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FeedMessageError(f"Feed message is not JSON: {raw!r}") from e

    if isinstance(data, dict):
        for key in COUNT_KEYS:
            if key in data:
                data = data[key]
                break
        else:
            raise FeedMessageError(f"Feed message has no count field: {raw!r}")

    if isinstance(data, str):
        try:
            data = int(data.strip())
        except ValueError as e:
            raise FeedMessageError(f"Feed count is not an integer: {raw!r}") from e

    if isinstance(data, bool) or not isinstance(data, int):
        raise FeedMessageError(f"Feed count is not an integer: {raw!r}")

    return data


class OccupancyFeedMetrics:
    """Metrics for OccupancyFeedConsumer observability."""

    __slots__ = (
        "messages_received",
        "reconnect_count",
        "last_count",
        "parse_errors",
        "rejected_counts",
    )

    def __init__(self) -> None:
        self.messages_received: int = 0
        self.reconnect_count: int = 0
        self.last_count: int = -1
        self.parse_errors: int = 0
        self.rejected_counts: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "messages_received": self.messages_received,
            "reconnect_count": self.reconnect_count,
            "last_count": self.last_count,
            "parse_errors": self.parse_errors,
            "rejected_counts": self.rejected_counts,
        }


class OccupancyFeedConsumer:
    """
    WebSocket consumer for occupancy counts.

    Attributes:
        url: WebSocket URL to connect to
        tracker: PresenceTracker receiving the counts
        connected: Whether currently connected
        metrics: Operational metrics

    Example:
        consumer = OccupancyFeedConsumer(
            url="ws://localhost:8765/occupancy",
            tracker=tracker,
        )

        task = asyncio.create_task(consumer.run())

        # Later, stop gracefully
        await consumer.stop()
        await task
    """

    def __init__(
        self,
        url: str,
        tracker: PresenceTracker,
        reconnect_backoff_ms: int = 5000,
        max_reconnect_attempts: int = 0,
    ) -> None:
        """
        Initialize feed consumer.

        Args:
            url: WebSocket URL of the occupancy feed
            tracker: PresenceTracker to push counts into
            reconnect_backoff_ms: Backoff between reconnect attempts
            max_reconnect_attempts: Max attempts (0 = unlimited)
        """
        self.url = url
        self.tracker = tracker
        self.reconnect_backoff_ms = reconnect_backoff_ms
        self.max_reconnect_attempts = max_reconnect_attempts

        self._websocket = None
        self._connected: bool = False
        self._running: bool = False
        self._stop_event: asyncio.Event = asyncio.Event()

        self.metrics = OccupancyFeedMetrics()

    @property
    def connected(self) -> bool:
        """Whether currently connected to the feed."""
        return self._connected

    async def run(self) -> None:
        """
        Start consuming counts.

        Runs indefinitely, reconnecting on disconnect.
        Call stop() to terminate gracefully. A stop() issued before run()
        gets scheduled is honoured; the consumer is single-use.
        """
        if self._stop_event.is_set():
            logger.info("OccupancyFeedConsumer stopped before start")
            return

        self._running = True

        logger.info(f"OccupancyFeedConsumer starting, connecting to {self.url}")

        while self._running:
            try:
                await self._connect_and_consume()
            except Exception as e:
                if not self._running:
                    break

                logger.error(f"Feed connection error: {e}")
                self._connected = False

                if (
                    self.max_reconnect_attempts > 0
                    and self.metrics.reconnect_count >= self.max_reconnect_attempts
                ):
                    logger.error(
                        f"Max reconnect attempts ({self.max_reconnect_attempts}) exceeded"
                    )
                    break

            if not self._running:
                break

            self.metrics.reconnect_count += 1
            backoff_sec = self.reconnect_backoff_ms / 1000.0
            logger.info(
                f"Reconnecting in {backoff_sec:.1f}s "
                f"(attempt {self.metrics.reconnect_count})"
            )

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=backoff_sec)
                break
            except asyncio.TimeoutError:
                pass

        logger.info("OccupancyFeedConsumer stopped")

    async def stop(self) -> None:
        """
        Stop consuming gracefully.

        Signals the run loop to exit and closes the connection.
        """
        logger.info("OccupancyFeedConsumer stopping...")
        self._running = False
        self._stop_event.set()

        if self._websocket is not None:
            try:
                await self._websocket.close()
            except ConnectionClosed:
                pass

        self._connected = False

    async def _connect_and_consume(self) -> None:
        """Connect to the feed and consume messages until disconnect."""
        async with websockets.connect(
            self.url,
            ping_interval=20,
            ping_timeout=10,
            close_timeout=5,
        ) as ws:
            self._websocket = ws
            self._connected = True
            logger.info(f"Connected to occupancy feed: {self.url}")

            try:
                # stop() may have run while the handshake was in progress
                if not self._running:
                    return

                async for message in ws:
                    if not self._running:
                        break
                    self.handle_message(message)

            except ConnectionClosedOK:
                logger.info("Feed connection closed normally")
            except ConnectionClosedError as e:
                logger.warning(f"Feed connection closed with error: {e}")
                raise
            finally:
                self._connected = False
                self._websocket = None

    def handle_message(self, raw) -> Optional[int]:
        """
        Apply a single feed message to the tracker.

        Args:
            raw: Text or bytes message

        Returns:
            The ingested count, or None if the message was discarded
        """
        self.metrics.messages_received += 1

        try:
            count = parse_count(raw)
        except FeedMessageError as e:
            self.metrics.parse_errors += 1
            logger.warning(str(e))
            return None

        try:
            self.tracker.ingest(count)
        except InvalidOccupancyError as e:
            self.metrics.rejected_counts += 1
            logger.warning(f"Rejected occupancy value: {e}")
            return None

        self.metrics.last_count = count
        return count
