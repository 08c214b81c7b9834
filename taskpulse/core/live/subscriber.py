"""Consumer side of the live stream.

``LiveSubscription`` keeps a long-lived SSE connection open against
``GET /api/v1/stream`` and reconnects on its own whenever the connection drops.
Each received event is handed to ``on_board_update``; connectivity changes
are reported through ``on_connection_status``.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import json
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from pydantic import ValidationError

from taskpulse.common.enums import ConnectionState
from taskpulse.common.logging import get_logger
from taskpulse.core.live.schemas import WebhookEvent

logger = get_logger("live.subscriber")

BoardUpdateCallback = Callable[[WebhookEvent], Awaitable[None] | None]
ConnectionStatusCallback = Callable[[bool], Awaitable[None] | None]


async def _call(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    try:
        result = callback(*args)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.error("Live subscription callback failed: %s", e)


class LiveSubscription:
    def __init__(
        self,
        url: str,
        on_board_update: BoardUpdateCallback | None = None,
        on_connection_status: ConnectionStatusCallback | None = None,
        retry_delay: float = 3.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.on_board_update = on_board_update
        self.on_connection_status = on_connection_status
        self.retry_delay = retry_delay
        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0
        self._client = client
        self._owns_client = client is None
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._closed = False
            self._task = asyncio.create_task(self.run(), name=f"live-subscription:{self.url}")
        return self._task

    async def run(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))

        while not self._closed:
            self.state = ConnectionState.CONNECTING
            self.attempts += 1
            try:
                await self._consume()
                logger.info("Live stream ended, reconnecting in %.1fs", self.retry_delay)
            except Exception as e:
                logger.warning("Live stream error (%s), reconnecting in %.1fs", e, self.retry_delay)

            await self._mark_disconnected()
            if self._closed:
                break
            await asyncio.sleep(self.retry_delay)

    async def _consume(self) -> None:
        async with self._client.stream("GET", self.url, headers={"Accept": "text/event-stream"}) as response:
            response.raise_for_status()
            self.state = ConnectionState.CONNECTED
            logger.info("Live stream connected: %s", self.url)
            await _call(self.on_connection_status, True)

            data_lines: list[str] = []
            async for line in response.aiter_lines():
                if line == "":
                    if data_lines:
                        await self._dispatch("\n".join(data_lines))
                        data_lines = []
                elif line.startswith(":"):
                    continue  # keep-alive comment
                elif line.startswith("data:"):
                    data_lines.append(line[5:].lstrip(" "))

            if data_lines:
                await self._dispatch("\n".join(data_lines))

    async def _dispatch(self, data: str) -> None:
        try:
            event = WebhookEvent.model_validate(json.loads(data))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Skipping unparsable live frame: %s", e)
            return
        await _call(self.on_board_update, event)

    async def _mark_disconnected(self) -> None:
        self.state = ConnectionState.DISCONNECTED
        await _call(self.on_connection_status, False)

    async def close(self) -> None:
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        await self._mark_disconnected()

    async def __aenter__(self) -> LiveSubscription:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
