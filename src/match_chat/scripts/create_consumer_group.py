"""One-time script: create the Redis Streams consumer group for match-engine events."""
from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis

from match_chat.config import settings
from match_chat.infrastructure.bus.redis_streams import RedisStreamConsumer
from match_chat.infrastructure.db.uow import sqlalchemy_uow
from match_chat.workers.match_events_consumer import MatchEventHandler

logger = logging.getLogger(__name__)


async def create_group() -> None:
    r = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        consumer = RedisStreamConsumer(
            r,
            settings.MATCH_EVENTS_STREAM,
            settings.MATCH_EVENTS_GROUP,
            "bootstrap",
            MatchEventHandler(sqlalchemy_uow),
        )
        await consumer.ensure_group()
        logger.info(
            "Consumer group '%s' ready on stream '%s'",
            settings.MATCH_EVENTS_GROUP,
            settings.MATCH_EVENTS_STREAM,
        )
    finally:
        await r.aclose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_group())


if __name__ == "__main__":
    main()
