import asyncio
from types import SimpleNamespace

import httpx
import pytest

from taskpulse.common.enums import ConnectionState
from taskpulse.core.live.subscriber import LiveSubscription

STREAM_URL = "http://test/api/v1/stream"

STREAM_BODY = (
    b'data: {"type": "connected", "timestamp": "2025-01-01T00:00:00+00:00"}\n\n'
    b": keep-alive\n\n"
    b"data: not-json\n\n"
    b'data: {"type": "monday_webhook", "boardId": "111", "itemId": "5", "timestamp": "2025-01-01T00:00:01+00:00"}\n\n'
)


def _stream_response() -> httpx.Response:
    return httpx.Response(200, headers={"Content-Type": "text/event-stream"}, content=STREAM_BODY)


@pytest.fixture
async def server():
    state = SimpleNamespace(requests=[], fail_first=False)

    def handler(request: httpx.Request) -> httpx.Response:
        state.requests.append(request)
        if state.fail_first and len(state.requests) == 1:
            return httpx.Response(503)
        return _stream_response()

    state.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    yield state
    await state.client.aclose()


def _recorder(expected_events: int):
    events, statuses = [], []
    done = asyncio.Event()

    def on_update(event):
        events.append(event)
        if len(events) >= expected_events:
            done.set()

    return events, statuses, done, on_update


@pytest.mark.asyncio
async def test_events_and_status_are_reported(server):
    events, statuses, done, on_update = _recorder(2)
    subscription = LiveSubscription(
        STREAM_URL,
        on_board_update=on_update,
        on_connection_status=statuses.append,
        retry_delay=0.01,
        client=server.client,
    )

    subscription.start()
    await asyncio.wait_for(done.wait(), timeout=2)
    await subscription.close()

    assert events[0].type == "connected"
    assert events[1].type == "monday_webhook"
    assert events[1].board_id == "111"
    assert events[1].item_id == "5"
    assert statuses[0] is True
    assert statuses[-1] is False
    assert subscription.state == ConnectionState.DISCONNECTED
    assert server.requests[0].headers["Accept"] == "text/event-stream"


@pytest.mark.asyncio
async def test_reconnects_after_error(server):
    server.fail_first = True
    events, statuses, done, on_update = _recorder(1)

    async with LiveSubscription(
        STREAM_URL,
        on_board_update=on_update,
        on_connection_status=statuses.append,
        retry_delay=0.01,
        client=server.client,
    ) as subscription:
        await asyncio.wait_for(done.wait(), timeout=2)
        assert subscription.attempts >= 2

    assert statuses[:2] == [False, True]
    assert statuses[-1] is False


@pytest.mark.asyncio
async def test_callback_errors_do_not_stop_the_stream(server):
    seen = []
    done = asyncio.Event()

    async def on_update(event):
        seen.append(event.type)
        if len(seen) >= 2:
            done.set()
        raise RuntimeError("dashboard blew up")

    subscription = LiveSubscription(STREAM_URL, on_board_update=on_update, retry_delay=0.01, client=server.client)
    subscription.start()
    await asyncio.wait_for(done.wait(), timeout=2)
    await subscription.close()

    assert seen[:2] == ["connected", "monday_webhook"]


@pytest.mark.asyncio
async def test_close_without_start_reports_disconnected():
    statuses = []
    subscription = LiveSubscription(STREAM_URL, on_connection_status=statuses.append)

    await subscription.close()

    assert statuses == [False]
    assert not subscription.is_connected
