import asyncio

import pytest

from taskpulse.core.live.broadcaster import Broadcaster, Channel, ChannelClosedError


def _collector():
    received: list[dict] = []

    def deliver(payload):
        received.append(payload)

    return received, deliver


@pytest.mark.asyncio
async def test_subscribe_sends_connected_event_first():
    broadcaster = Broadcaster()
    channel = await broadcaster.subscribe()

    first = await channel.receive(timeout=1)
    assert first["type"] == "connected"
    assert "timestamp" in first


@pytest.mark.asyncio
async def test_broadcast_reaches_every_channel():
    broadcaster = Broadcaster()
    inboxes = []
    for _ in range(3):
        received, deliver = _collector()
        await broadcaster.subscribe(deliver)
        inboxes.append(received)

    delivered = await broadcaster.broadcast({"type": "monday_webhook", "boardId": "1"})

    assert delivered == 3
    for received in inboxes:
        assert received[-1] == {"type": "monday_webhook", "boardId": "1"}


@pytest.mark.asyncio
async def test_failing_channel_is_dropped_without_affecting_others():
    broadcaster = Broadcaster()
    first, deliver_first = _collector()
    last, deliver_last = _collector()
    calls = 0

    def flaky(payload):
        nonlocal calls
        calls += 1
        if payload.get("type") != "connected":
            raise ConnectionResetError("transport closed")

    await broadcaster.subscribe(deliver_first)
    broken = await broadcaster.subscribe(flaky)
    await broadcaster.subscribe(deliver_last)

    assert await broadcaster.broadcast({"type": "x"}) == 2
    assert first[-1] == {"type": "x"}
    assert last[-1] == {"type": "x"}
    assert not broadcaster.is_subscribed(broken)
    assert broken.closed

    assert await broadcaster.broadcast({"type": "y"}) == 2
    assert calls == 2
    assert broadcaster.active_channels == 2


@pytest.mark.asyncio
async def test_async_delivery_callbacks_are_awaited():
    broadcaster = Broadcaster()
    received = []

    async def deliver(payload):
        await asyncio.sleep(0)
        received.append(payload["type"])

    await broadcaster.subscribe(deliver)
    await broadcaster.broadcast({"type": "x"})

    assert received == ["connected", "x"]


@pytest.mark.asyncio
async def test_unsubscribe_is_idempotent():
    broadcaster = Broadcaster()
    keep, deliver = _collector()
    await broadcaster.subscribe(deliver)
    channel = await broadcaster.subscribe()

    broadcaster.unsubscribe(channel)
    broadcaster.unsubscribe(channel)
    broadcaster.unsubscribe(channel.id)

    assert broadcaster.active_channels == 1
    assert await broadcaster.broadcast({"type": "x"}) == 1
    assert keep[-1] == {"type": "x"}


@pytest.mark.asyncio
async def test_full_queue_counts_as_failed_delivery():
    broadcaster = Broadcaster(max_queue=1)
    channel = await broadcaster.subscribe()  # the connected event fills the queue

    assert await broadcaster.broadcast({"type": "x"}) == 0
    assert not broadcaster.is_subscribed(channel)


@pytest.mark.asyncio
async def test_receive_times_out_with_heartbeat():
    channel = Channel()

    assert await channel.receive(timeout=0.01) is None


@pytest.mark.asyncio
async def test_closed_channel_rejects_sends():
    channel = Channel()
    channel.close()

    with pytest.raises(ChannelClosedError):
        await channel.send({"type": "x"})


@pytest.mark.asyncio
async def test_payloads_arrive_in_order():
    broadcaster = Broadcaster()
    channel = await broadcaster.subscribe()
    for n in range(5):
        await broadcaster.broadcast({"type": "tick", "n": n})

    await channel.receive(timeout=1)  # connected
    received = [(await channel.receive(timeout=1))["n"] for _ in range(5)]
    assert received == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_concurrent_subscribe_and_broadcast():
    broadcaster = Broadcaster()

    async def churn():
        channel = await broadcaster.subscribe()
        await asyncio.sleep(0)
        broadcaster.unsubscribe(channel)

    await asyncio.gather(*(churn() for _ in range(20)), *(broadcaster.broadcast({"type": "x"}) for _ in range(20)))

    assert broadcaster.active_channels == 0


@pytest.mark.asyncio
async def test_hung_callback_is_dropped_after_delivery_timeout():
    broadcaster = Broadcaster(delivery_timeout=0.05)
    received, deliver = _collector()
    release = asyncio.Event()

    async def hangs(payload):
        if payload["type"] != "connected":
            await release.wait()

    stuck = await broadcaster.subscribe(hangs)
    await broadcaster.subscribe(deliver)

    delivered = await asyncio.wait_for(broadcaster.broadcast({"type": "x"}), timeout=1)

    assert delivered == 1
    assert received[-1] == {"type": "x"}
    assert not broadcaster.is_subscribed(stuck)
