"""Consumer for match-engine events via Redis Streams."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable

import redis.asyncio as aioredis

from match_chat.application.uow import UoWFactory
from match_chat.config import settings
from match_chat.domain.events.like_created import LikeCreated
from match_chat.domain.events.match_created import MatchCreated
from match_chat.domain.value_objects.enums import NotificationType
from match_chat.infrastructure.bus.redis_streams import RedisStreamConsumer
from match_chat.infrastructure.db.uow import sqlalchemy_uow
from match_chat.infrastructure.ws.protocol import ServerEvent
from match_chat.services import notification_service

logger = logging.getLogger(__name__)

PushToUser = Callable[[int, str, dict[str, Any]], Awaitable[int]]

_TRUTHY = {"1", "true", "yes"}


def parse_match_created(fields: dict[str, Any]) -> MatchCreated:
    return MatchCreated(
        match_id=uuid.UUID(fields["match_id"]),
        user1_id=int(fields["user1_id"]),
        user2_id=int(fields["user2_id"]),
    )


def parse_like_created(fields: dict[str, Any]) -> LikeCreated:
    return LikeCreated(
        liker_id=int(fields["liker_id"]),
        liked_id=int(fields["liked_id"]),
        is_super=str(fields.get("super", "")).lower() in _TRUTHY,
    )


class MatchEventHandler:
    """Turns stream entries into notifications; pushes them live when a hub is attached."""

    def __init__(self, uow_factory: UoWFactory, push: PushToUser | None = None) -> None:
        self._uow_factory = uow_factory
        self._push = push

    async def __call__(self, event_type: str, fields: dict[str, Any]) -> None:
        if event_type == "match.created":
            await self._on_match_created(parse_match_created(fields))
        elif event_type == "like.created":
            await self._on_like_created(parse_like_created(fields))
        else:
            logger.debug("Ignoring unknown event: %s", event_type)

    async def _on_match_created(self, event: MatchCreated) -> None:
        async with self._uow_factory() as uow:
            await notification_service.create_match_notifications(event, uow)
        logger.info(
            "Match %s: notified users %d and %d",
            event.match_id, event.user1_id, event.user2_id,
        )
        if self._push is None:
            return
        payload = {"type": NotificationType.MATCH.value, "matchId": str(event.match_id)}
        for user_id in (event.user1_id, event.user2_id):
            await self._push(user_id, ServerEvent.MATCH_NOTIFICATION, payload)

    async def _on_like_created(self, event: LikeCreated) -> None:
        async with self._uow_factory() as uow:
            await notification_service.create_like_notification(event, uow)
        logger.info(
            "%s from %d to %d",
            "Super like" if event.is_super else "Like", event.liker_id, event.liked_id,
        )


async def run_consumer() -> None:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    consumer_name = f"consumer-{uuid.uuid4().hex[:8]}"

    # Standalone process: no sockets to push to, notifications only.
    consumer = RedisStreamConsumer(
        redis=redis,
        stream=settings.MATCH_EVENTS_STREAM,
        group=settings.MATCH_EVENTS_GROUP,
        consumer=consumer_name,
        handler=MatchEventHandler(sqlalchemy_uow),
    )
    await consumer.start()
    logger.info("Match events consumer started (%s)", consumer_name)

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await consumer.stop()
        await redis.aclose()


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run_consumer())


if __name__ == "__main__":
    main()
