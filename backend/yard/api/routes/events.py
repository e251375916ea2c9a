"""Live Updates — Server-Sent Events stream of committed container mutations.

Invariants:
    - One broadcaster subscription per connected client, released on disconnect
    - Event lines are `data: {"type": <event>, "data": <payload>}`
    - A keep-alive comment is sent when no event arrives within the interval

Design Decisions:
    - SSE over WebSocket: one-way fan-out, plain HTTP, works through proxies
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from yard.config import Settings, get_settings
from yard.infrastructure.event_broadcaster import get_broadcaster

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/events", tags=["events"])

# SSE headers prevent proxy/browser buffering of streamed events.
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}
KEEPALIVE_LINE = ": keep-alive\n\n"


def sse_line(event: dict) -> str:
    """Format event as SSE data line."""
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


@router.get("")
async def stream_events(
    request: Request, settings: Settings = Depends(get_settings),
):
    """Subscribe to containerAdded/Updated/Assigned/Shipped events."""
    broadcaster = get_broadcaster()

    async def event_generator():
        async with broadcaster.subscribe() as queue:
            try:
                while True:
                    try:
                        message = await asyncio.wait_for(
                            queue.get(), timeout=settings.event_keepalive_seconds,
                        )
                    except asyncio.TimeoutError:
                        if await request.is_disconnected():
                            return
                        yield KEEPALIVE_LINE
                        continue
                    yield sse_line(message)
            except asyncio.CancelledError:
                logger.info("Client disconnected from event stream")
                return

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
