from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Match:
    """Two-party pairing owned by the match engine; the chat channel key."""

    id: UUID
    user1_id: int
    user2_id: int
    is_active: bool
    matched_at: datetime
    last_message_at: datetime | None = None

    @property
    def participants(self) -> frozenset[int]:
        return frozenset((self.user1_id, self.user2_id))

    def has_participant(self, user_id: int) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def other_participant(self, user_id: int) -> int:
        if user_id == self.user1_id:
            return self.user2_id
        if user_id == self.user2_id:
            return self.user1_id
        raise ValueError(f"user {user_id} is not part of match {self.id}")
