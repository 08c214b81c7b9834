"""Server-Sent Events framing for broadcaster channels."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from taskpulse.core.live.broadcaster import Broadcaster, Channel

HEARTBEAT_FRAME = ": keep-alive\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


async def event_stream(
    channel: Channel,
    broadcaster: Broadcaster,
    heartbeat_seconds: float,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
) -> AsyncIterator[str]:
    """Yield SSE frames for ``channel`` until it closes or the client leaves.

    The channel is always unsubscribed on exit, including cancellation.
    """
    try:
        while not channel.closed:
            if is_disconnected is not None and await is_disconnected():
                break
            payload = await channel.receive(timeout=heartbeat_seconds)
            if payload is None:
                yield HEARTBEAT_FRAME
            else:
                yield format_sse(payload)
    finally:
        broadcaster.unsubscribe(channel)
