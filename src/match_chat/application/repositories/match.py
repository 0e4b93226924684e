from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from match_chat.domain.entities.match import Match


class MatchReader(Protocol):
    async def get_by_id(self, match_id: UUID) -> Match | None: ...

    async def list_active_for_user(self, user_id: int) -> list[Match]:
        """Active matches where the user is either participant."""
        ...


class MatchWriter(Protocol):
    async def create(self, match: Match) -> Match: ...

    async def touch_last_message_at(self, match_id: UUID, ts: datetime) -> None: ...
