import json

import pytest

from taskpulse.core.live.broadcaster import Broadcaster
from taskpulse.core.live.sse import HEARTBEAT_FRAME, event_stream, format_sse


def test_format_sse_frame():
    frame = format_sse({"type": "connected", "name": "Скорик"})

    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    assert json.loads(frame[len("data: "):]) == {"type": "connected", "name": "Скорик"}


@pytest.mark.asyncio
async def test_stream_emits_connected_then_heartbeat_then_events():
    broadcaster = Broadcaster()
    channel = await broadcaster.subscribe()
    stream = event_stream(channel, broadcaster, heartbeat_seconds=0.01)

    first = await anext(stream)
    assert json.loads(first[len("data: "):])["type"] == "connected"

    assert await anext(stream) == HEARTBEAT_FRAME

    await broadcaster.broadcast({"type": "monday_webhook", "boardId": "7"})
    frame = await anext(stream)
    while frame == HEARTBEAT_FRAME:
        frame = await anext(stream)
    assert json.loads(frame[len("data: "):])["boardId"] == "7"

    await stream.aclose()
    assert not broadcaster.is_subscribed(channel)


@pytest.mark.asyncio
async def test_stream_stops_when_client_disconnects():
    broadcaster = Broadcaster()
    channel = await broadcaster.subscribe()

    async def disconnected():
        return True

    frames = [frame async for frame in event_stream(channel, broadcaster, 0.01, is_disconnected=disconnected)]

    assert frames == []
    assert broadcaster.active_channels == 0
