from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from match_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_messages(
        self,
        match_id: UUID,
        *,
        before_seq: int | None = None,
        limit: int = 50,
    ) -> list[Message]:
        """The ``limit`` most recent messages below ``before_seq``, oldest first."""
        ...

    async def get_last(self, match_id: UUID) -> Message | None: ...

    async def count_unread(self, match_id: UUID, receiver_id: int) -> int: ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message:
        """Insert and return the stored message with its assigned ``seq``."""
        ...

    async def mark_read_for_receiver(
        self, match_id: UUID, receiver_id: int, read_at: datetime
    ) -> int:
        """Flag every unread message addressed to receiver. Returns rows touched."""
        ...
