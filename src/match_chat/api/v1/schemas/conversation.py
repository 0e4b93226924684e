from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from match_chat.api.v1.schemas.message import MessageResponse


class ConversationResponse(BaseModel):
    match_id: UUID
    other_user_id: int
    last_message: MessageResponse | None
    unread_count: int
    last_activity: datetime

    model_config = {"from_attributes": True}
