from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID


class ChannelLocks:
    """Per-match locks: operations on one channel run one at a time, channels interleave freely."""

    def __init__(self) -> None:
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._holders: dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, match_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(match_id, asyncio.Lock())
        self._holders[match_id] = self._holders.get(match_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[match_id] -= 1
            if not self._holders[match_id]:
                del self._holders[match_id]
                del self._locks[match_id]

    def __len__(self) -> int:
        return len(self._locks)
