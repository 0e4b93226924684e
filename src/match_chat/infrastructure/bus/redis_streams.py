"""Redis Streams consumer (XREADGROUP + XACK) for match-engine events."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

StreamHandler = Callable[[str, dict[str, Any]], Awaitable[None]]


class RedisStreamConsumer:
    """Reads one stream through a consumer group and hands each entry to a handler.

    An entry is acked after the handler returns. Entries whose fields cannot be
    parsed (KeyError / ValueError) are acked and dropped; any other failure
    leaves the entry pending for a later claim.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        stream: str,
        group: str,
        consumer: str,
        handler: StreamHandler,
        *,
        batch_size: int = 10,
        block_ms: int = 5000,
        retry_delay: float = 5.0,
    ) -> None:
        self._redis = redis
        self._stream = stream
        self._group = group
        self._consumer = consumer
        self._handler = handler
        self._batch_size = batch_size
        self._block_ms = block_ms
        self._retry_delay = retry_delay
        self._task: asyncio.Task[None] | None = None

    async def ensure_group(self) -> None:
        try:
            await self._redis.xgroup_create(
                self._stream, self._group, id="$", mkstream=True
            )
            logger.info("Created consumer group %s on %s", self._group, self._stream)
        except aioredis.ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise
            logger.debug("Consumer group %s already exists", self._group)

    async def start(self) -> None:
        await self.ensure_group()
        self._task = asyncio.create_task(self._run(), name=f"stream-{self._stream}")
        logger.info("Stream consumer started: stream=%s group=%s", self._stream, self._group)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stream consumer stopped: stream=%s", self._stream)

    async def handle_entry(self, entry_id: str, fields: dict[str, Any]) -> bool:
        """Process one entry; returns True if it was acked."""
        event_type = fields.get("event_type", "unknown")
        try:
            await self._handler(event_type, fields)
        except (KeyError, ValueError):
            logger.warning(
                "Dropping malformed %s entry %s: %r", event_type, entry_id, fields,
                exc_info=True,
            )
        except Exception:
            logger.exception("Error processing %s entry %s", event_type, entry_id)
            return False
        await self._redis.xack(self._stream, self._group, entry_id)
        return True

    async def _run(self) -> None:
        while True:
            try:
                batches = await self._redis.xreadgroup(
                    groupname=self._group,
                    consumername=self._consumer,
                    streams={self._stream: ">"},
                    count=self._batch_size,
                    block=self._block_ms,
                )
                for _stream_name, entries in batches or ():
                    for entry_id, fields in entries:
                        await self.handle_entry(entry_id, fields)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(
                    "Stream consumer error, retrying in %.0fs", self._retry_delay,
                )
                await asyncio.sleep(self._retry_delay)
