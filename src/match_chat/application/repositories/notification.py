from __future__ import annotations

from typing import Protocol
from uuid import UUID

from match_chat.domain.entities.notification import Notification


class NotificationReader(Protocol):
    async def list_for_user(
        self, user_id: int, *, limit: int = 50, skip: int = 0
    ) -> list[Notification]: ...

    async def count_unread(self, user_id: int) -> int: ...


class NotificationWriter(Protocol):
    async def create(self, notification: Notification) -> Notification: ...

    async def mark_read(self, notification_id: UUID, user_id: int) -> bool:
        """Returns False when no notification of that user matched."""
        ...

    async def mark_all_read(self, user_id: int) -> int: ...
