from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from match_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class ConversationSummaryDTO:
    match_id: UUID
    other_user_id: int
    last_message: Message | None
    unread_count: int
    last_activity: datetime
