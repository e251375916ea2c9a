"""Event Broadcaster — in-process fan-out of committed mutations to live subscribers.

Invariants:
    - publish() never blocks and never raises for a slow subscriber
    - Each subscriber owns a bounded queue; overflow drops the message (logged)
    - Subscriptions are removed when the subscriber's context exits (client disconnect)

Design Decisions:
    - asyncio.Queue per subscriber over a shared buffer: one slow client cannot
      stall the others or the allocation engine
    - Best-effort only: no acknowledgment, no replay
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from yard.core.domain_types import YardEvent

logger = logging.getLogger(__name__)


class EventBroadcaster:
    """Implements EventPublisher for the SSE live-update stream."""

    def __init__(self, queue_size: int = 100):
        self._queue_size = queue_size
        self._subscribers: set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: YardEvent, payload: dict) -> None:
        message = {"type": event.value, "data": payload}
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning(
                    f"Dropped {event.value} for slow subscriber",
                    extra={"event": event.value},
                )

    @asynccontextmanager
    async def subscribe(self) -> AsyncGenerator[asyncio.Queue, None]:
        """Register a subscriber queue for the duration of the context."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.add(queue)
        logger.info(f"Live-update subscriber connected ({self.subscriber_count})")
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)
            logger.info(
                f"Live-update subscriber disconnected ({self.subscriber_count})",
            )


# Singleton (initialized on startup)
broadcaster: EventBroadcaster | None = None


def init_broadcaster(queue_size: int = 100) -> EventBroadcaster:
    global broadcaster
    broadcaster = EventBroadcaster(queue_size)
    return broadcaster


def get_broadcaster() -> EventBroadcaster:
    """Return the process broadcaster, creating a default one if startup has not run."""
    if broadcaster is None:
        return init_broadcaster()
    return broadcaster
