"""Seed development data: creates the tables, one match and a short conversation."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from match_chat.application.dto.principal import Principal
from match_chat.domain.entities.match import Match
from match_chat.infrastructure.db.base import Base
from match_chat.infrastructure.db.models import MatchModel  # noqa: F401  (registers tables)
from match_chat.infrastructure.db.session import engine
from match_chat.infrastructure.db.uow import sqlalchemy_uow
from match_chat.services import message_service

logger = logging.getLogger(__name__)

ALICE, BOB = 42, 43


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    match_id = uuid.uuid4()
    async with sqlalchemy_uow() as uow:
        await uow.matches_w.create(
            Match(
                id=match_id,
                user1_id=ALICE,
                user2_id=BOB,
                is_active=True,
                matched_at=datetime.now(timezone.utc),
            )
        )
        await uow.commit()

        lines = [
            (ALICE, "Hey! Loved your hiking photos."),
            (BOB, "Thanks! That was the Dolomites last summer."),
            (ALICE, "No way, I was there in August"),
        ]
        for sender, content in lines:
            await message_service.send_message(
                match_id, Principal(user_id=sender, roles=[]), content, "text", uow,
            )

    logger.info("Seeded match %s (%d <-> %d) with %d messages", match_id, ALICE, BOB, len(lines))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
