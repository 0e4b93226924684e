from __future__ import annotations

from datetime import datetime

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from match_chat.infrastructure.db.models.user_activity import UserActivityModel


class UserActivityWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def set_online(self, user_id: int, is_online: bool, ts: datetime) -> None:
        stmt = (
            pg_insert(UserActivityModel)
            .values(user_id=user_id, is_online=is_online, last_active=ts)
            .on_conflict_do_update(
                index_elements=[UserActivityModel.user_id],
                set_={"is_online": is_online, "last_active": ts},
            )
        )
        await self._session.execute(stmt)
