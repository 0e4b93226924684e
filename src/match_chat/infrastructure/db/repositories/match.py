from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from match_chat.domain.entities.match import Match
from match_chat.infrastructure.db.mappers import match as mapper
from match_chat.infrastructure.db.models.match import MatchModel


class MatchReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, match_id: UUID) -> Match | None:
        result = await self._session.get(MatchModel, match_id)
        return mapper.model_to_entity(result) if result else None

    async def list_active_for_user(self, user_id: int) -> list[Match]:
        stmt = (
            select(MatchModel)
            .where(
                or_(MatchModel.user1_id == user_id, MatchModel.user2_id == user_id),
                MatchModel.is_active.is_(True),
            )
            .order_by(
                MatchModel.last_message_at.desc().nullslast(),
                MatchModel.matched_at.desc(),
            )
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MatchWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, match: Match) -> Match:
        model = mapper.entity_to_model(match)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def touch_last_message_at(self, match_id: UUID, ts: datetime) -> None:
        stmt = (
            update(MatchModel)
            .where(MatchModel.id == match_id)
            .values(last_message_at=ts)
        )
        await self._session.execute(stmt)
