"""Stale-while-revalidate cache of board trees.

Entries are keyed by the selected board set. A fresh entry is served as is;
a stale one is served immediately while a background refresh runs. Live
events for a cached board trigger that refresh straight away, and a failed
refresh leaves the last good data in place. The least recently read entries
are evicted once the cache holds more than ``max_entries`` board sets.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from taskpulse.common.enums import LiveEventType
from taskpulse.common.logging import get_logger
from taskpulse.core.metrics.schemas import Board

logger = get_logger("boards.cache")

BoardFetcher = Callable[[Sequence[str]], Awaitable[list[Board]]]


def cache_key(board_ids: Iterable[str]) -> str:
    return "boards-" + ",".join(sorted({str(b) for b in board_ids}))


@dataclass
class CacheEntry:
    board_ids: tuple[str, ...]
    boards: list[Board]
    fetched_at: float
    stale: bool = False
    # Invalidated again while a refresh was in flight
    rerun: bool = False
    refreshing: asyncio.Task | None = field(default=None, repr=False)


class BoardCache:
    def __init__(
        self,
        fetcher: BoardFetcher,
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 64,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._fetcher = fetcher
        self._ttl = ttl_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}
        self._closed = False

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return not entry.stale and self._clock() - entry.fetched_at < self._ttl

    async def get_boards(self, board_ids: Sequence[str]) -> list[Board]:
        key = cache_key(board_ids)
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
            if not self._is_fresh(entry):
                self._schedule_refresh(key)
            return entry.boards

        lock = self._locks.setdefault(key, asyncio.Lock())
        try:
            async with lock:
                # Another caller may have filled the entry while we waited
                entry = self._entries.get(key)
                if entry is not None:
                    return entry.boards
                return await self._fetch(key, tuple(sorted({str(b) for b in board_ids})))
        finally:
            if self._locks.get(key) is lock:
                del self._locks[key]

    async def _fetch(self, key: str, board_ids: tuple[str, ...]) -> list[Board]:
        boards = await self._fetcher(list(board_ids))
        previous = self._entries.get(key)
        self._entries[key] = CacheEntry(
            board_ids=board_ids,
            boards=boards,
            fetched_at=self._clock(),
            rerun=previous.rerun if previous else False,
            refreshing=previous.refreshing if previous else None,
        )
        self._entries.move_to_end(key)
        self._evict()
        logger.debug("Cached %s (%d boards)", key, len(boards))
        return boards

    def _evict(self) -> None:
        while len(self._entries) > self._max_entries:
            key, entry = self._entries.popitem(last=False)
            if entry.refreshing is not None and not entry.refreshing.done():
                entry.refreshing.cancel()
            logger.debug("Evicted %s", key)

    def _schedule_refresh(self, key: str) -> asyncio.Task | None:
        entry = self._entries.get(key)
        if entry is None or self._closed:
            return None
        if entry.refreshing is not None and not entry.refreshing.done():
            return entry.refreshing
        entry.refreshing = asyncio.create_task(self._refresh(key, entry.board_ids))
        return entry.refreshing

    async def _refresh(self, key: str, board_ids: tuple[str, ...]) -> None:
        try:
            await self._fetch(key, board_ids)
        except Exception as e:
            logger.warning("Background refresh of %s failed, keeping cached data: %s", key, e)
        else:
            entry = self._entries.get(key)
            if entry is not None and entry.rerun:
                # The board changed again after this fetch started
                entry.rerun = False
                entry.stale = True
                entry.refreshing = None
                self._schedule_refresh(key)
                return
        finally:
            entry = self._entries.get(key)
            if entry is not None and entry.refreshing is asyncio.current_task():
                entry.refreshing = None

    def invalidate_board(self, board_id: str) -> list[asyncio.Task]:
        """Mark every entry containing ``board_id`` stale and start refreshes.

        An entry already being refreshed is flagged so one more fetch runs
        after the current one, since that fetch may predate the change.
        """
        tasks = []
        for key, entry in list(self._entries.items()):
            if str(board_id) in entry.board_ids:
                entry.stale = True
                if entry.refreshing is not None and not entry.refreshing.done():
                    entry.rerun = True
                task = self._schedule_refresh(key)
                if task is not None:
                    tasks.append(task)
        if tasks:
            logger.info("Board %s changed, refreshing %d cache entries", board_id, len(tasks))
        return tasks

    async def handle_event(self, payload: dict[str, Any]) -> None:
        """Broadcaster callback: refresh cached boards touched by a webhook."""
        if payload.get("type") != LiveEventType.MONDAY_WEBHOOK.value:
            return
        board_id = payload.get("boardId")
        if board_id:
            self.invalidate_board(board_id)

    def clear(self) -> None:
        self._entries.clear()

    async def aclose(self) -> None:
        self._closed = True
        tasks = [e.refreshing for e in self._entries.values() if e.refreshing and not e.refreshing.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
