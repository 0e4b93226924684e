from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Generic, TypeVar

from match_chat.application.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryGate(Generic[T]):
    """Throttles an async fetch.

    At most one call per ``min_interval``. Triggers that land inside the
    interval, and calls rejected with RateLimitedError, collapse into a single
    scheduled retry; further triggers while it is pending are absorbed.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        *,
        min_interval: float = 2.0,
        backoff: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._min_interval = min_interval
        self._backoff = backoff
        self._clock = clock
        self._last_call: float | None = None
        self._retry: asyncio.Task[None] | None = None
        self.calls = 0

    @property
    def retry_pending(self) -> bool:
        return self._retry is not None and not self._retry.done()

    async def trigger(self) -> T | None:
        """Call now if allowed, otherwise make sure one retry is scheduled. None when deferred."""
        if self.retry_pending:
            return None
        if self._last_call is not None:
            elapsed = self._clock() - self._last_call
            if elapsed < self._min_interval:
                self._schedule(self._min_interval - elapsed)
                return None
        return await self._call()

    async def _call(self) -> T | None:
        self._last_call = self._clock()
        self.calls += 1
        try:
            return await self._fetch()
        except RateLimitedError as exc:
            delay = exc.retry_after or self._backoff
            logger.info("Rate limited, retrying in %.1fs", delay)
            self._schedule(delay, replace=True)
            return None

    def _schedule(self, delay: float, *, replace: bool = False) -> None:
        if self.retry_pending and not replace:
            return
        self._retry = asyncio.create_task(self._retry_after(delay))

    async def _retry_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self._call()
        except Exception:
            logger.exception("Scheduled retry failed")

    async def aclose(self) -> None:
        if self._retry is not None and not self._retry.done():
            self._retry.cancel()
            try:
                await self._retry
            except asyncio.CancelledError:
                pass
        self._retry = None
