"""In-process fan-out of live events to stream subscribers."""

from __future__ import annotations

import asyncio
import inspect
import threading
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from taskpulse.common.logging import get_logger
from taskpulse.core.live.schemas import connected_event

logger = get_logger("live.broadcaster")

Payload = dict[str, Any]
DeliverCallback = Callable[[Payload], Awaitable[None] | None]

DEFAULT_QUEUE_SIZE = 256
DEFAULT_DELIVERY_TIMEOUT = 5.0


class ChannelClosedError(RuntimeError):
    pass


class Channel:
    """A single subscriber.

    Channels created with a ``deliver`` callback push payloads straight into
    it. An async callback that does not finish within ``delivery_timeout``
    seconds counts as a failed delivery. Otherwise payloads are buffered in a
    bounded queue and read back with :meth:`receive`; a full queue counts as a
    failed delivery.
    """

    def __init__(
        self,
        deliver: DeliverCallback | None = None,
        max_queue: int = DEFAULT_QUEUE_SIZE,
        delivery_timeout: float | None = DEFAULT_DELIVERY_TIMEOUT,
    ):
        self.id = uuid.uuid4().hex[:12]
        self.closed = False
        self._deliver = deliver
        self._delivery_timeout = delivery_timeout
        self._queue: asyncio.Queue[Payload] | None = None if deliver else asyncio.Queue(maxsize=max_queue)

    async def send(self, payload: Payload) -> None:
        if self.closed:
            raise ChannelClosedError(f"channel {self.id} is closed")
        if self._deliver is not None:
            result = self._deliver(payload)
            if inspect.isawaitable(result):
                await asyncio.wait_for(result, self._delivery_timeout)
        else:
            self._queue.put_nowait(payload)

    async def receive(self, timeout: float | None = None) -> Payload | None:
        """Wait for the next payload.

        Returns ``None`` when nothing arrived within ``timeout`` seconds; the
        stream layer turns that into a keep-alive frame.
        """
        if self._queue is None:
            raise ChannelClosedError(f"channel {self.id} has no buffer to read from")
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    def close(self) -> None:
        self.closed = True


class Broadcaster:
    """Registry of live channels.

    One instance lives for the lifetime of the process and is shared by the
    webhook endpoint (producer) and every stream connection (consumers).
    """

    def __init__(
        self,
        max_queue: int = DEFAULT_QUEUE_SIZE,
        delivery_timeout: float | None = DEFAULT_DELIVERY_TIMEOUT,
    ):
        self._channels: dict[str, Channel] = {}
        self._lock = threading.Lock()
        self._max_queue = max_queue
        self._delivery_timeout = delivery_timeout

    async def subscribe(self, deliver: DeliverCallback | None = None) -> Channel:
        channel = Channel(deliver, max_queue=self._max_queue, delivery_timeout=self._delivery_timeout)
        with self._lock:
            self._channels[channel.id] = channel
            total = len(self._channels)
        logger.info("Channel subscribed: %s (%d total)", channel.id, total)

        try:
            await channel.send(connected_event().to_payload())
        except Exception as e:
            logger.warning("Channel %s failed on connect, dropping: %s", channel.id, e)
            self.unsubscribe(channel)
        return channel

    def unsubscribe(self, channel: Channel | str) -> None:
        channel_id = channel if isinstance(channel, str) else channel.id
        with self._lock:
            removed = self._channels.pop(channel_id, None)
        if removed is None:
            return
        removed.close()
        logger.info("Channel unsubscribed: %s", channel_id)

    async def broadcast(self, payload: Payload) -> int:
        """Deliver ``payload`` to every channel; return the number reached."""
        with self._lock:
            targets = list(self._channels.values())

        delivered = 0
        dead: list[Channel] = []
        for channel in targets:
            try:
                await channel.send(payload)
                delivered += 1
            except Exception as e:
                logger.debug("Delivery to channel %s failed: %r", channel.id, e)
                dead.append(channel)

        for channel in dead:
            self.unsubscribe(channel)

        logger.debug("Broadcast %s to %d/%d channels", payload.get("type"), delivered, len(targets))
        return delivered

    def is_subscribed(self, channel: Channel | str) -> bool:
        channel_id = channel if isinstance(channel, str) else channel.id
        with self._lock:
            return channel_id in self._channels

    @property
    def active_channels(self) -> int:
        with self._lock:
            return len(self._channels)
