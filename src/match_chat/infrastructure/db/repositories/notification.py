from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from match_chat.domain.entities.notification import Notification
from match_chat.infrastructure.db.mappers import notification as mapper
from match_chat.infrastructure.db.models.notification import NotificationModel


class NotificationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_user(
        self,
        user_id: int,
        *,
        limit: int = 50,
        skip: int = 0,
    ) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.recipient_id == user_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_unread(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(NotificationModel).where(
            NotificationModel.recipient_id == user_id,
            NotificationModel.is_read.is_(False),
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class NotificationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, notification: Notification) -> Notification:
        model = mapper.entity_to_model(notification)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(self, notification_id: UUID, user_id: int) -> bool:
        stmt = (
            update(NotificationModel)
            .where(
                NotificationModel.id == notification_id,
                NotificationModel.recipient_id == user_id,
            )
            .values(is_read=True)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)

    async def mark_all_read(self, user_id: int) -> int:
        stmt = (
            update(NotificationModel)
            .where(
                NotificationModel.recipient_id == user_id,
                NotificationModel.is_read.is_(False),
            )
            .values(is_read=True)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
