from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from match_chat.domain.entities.message import Message
from match_chat.infrastructure.db.mappers import message as mapper
from match_chat.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_messages(
        self,
        match_id: UUID,
        *,
        before_seq: int | None = None,
        limit: int = 50,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.match_id == match_id)
            .order_by(MessageModel.seq.desc())
            .limit(limit)
        )
        if before_seq is not None:
            stmt = stmt.where(MessageModel.seq < before_seq)
        result = await self._session.execute(stmt)
        # Newest page fetched descending, returned chronologically.
        return [mapper.model_to_entity(m) for m in reversed(result.scalars().all())]

    async def get_last(self, match_id: UUID) -> Message | None:
        stmt = (
            select(MessageModel)
            .where(MessageModel.match_id == match_id)
            .order_by(MessageModel.seq.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def count_unread(self, match_id: UUID, receiver_id: int) -> int:
        stmt = select(func.count()).select_from(MessageModel).where(
            MessageModel.match_id == match_id,
            MessageModel.receiver_id == receiver_id,
            MessageModel.is_read.is_(False),
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        stmt = (
            insert(MessageModel)
            .values(**mapper.entity_to_values(message))
            .returning(MessageModel)
        )
        result = await self._session.execute(stmt)
        return mapper.model_to_entity(result.scalar_one())

    async def mark_read_for_receiver(
        self,
        match_id: UUID,
        receiver_id: int,
        read_at: datetime,
    ) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.match_id == match_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.is_read.is_(False),
            )
            .values(is_read=True, read_at=read_at)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
