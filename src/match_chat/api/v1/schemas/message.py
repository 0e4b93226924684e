from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from match_chat.domain.value_objects.enums import MessageType


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str
    message_type: MessageType = Field(MessageType.TEXT, alias="messageType")


class MessageResponse(BaseModel):
    id: UUID
    match_id: UUID
    sender_id: int
    receiver_id: int
    type: str
    content: str
    is_read: bool
    read_at: datetime | None
    created_at: datetime
    seq: int

    model_config = {"from_attributes": True}
