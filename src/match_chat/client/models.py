from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class ChatMessage(BaseModel):
    id: UUID
    match_id: UUID
    sender_id: int
    receiver_id: int
    type: str
    content: str
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime
    seq: int


class Conversation(BaseModel):
    match_id: UUID
    other_user_id: int
    last_message: ChatMessage | None = None
    unread_count: int = 0
    last_activity: datetime


class Notification(BaseModel):
    id: UUID
    recipient_id: int
    type: str
    title: str
    body: str
    is_read: bool = False
    created_at: datetime
    data: dict[str, Any] | None = None


class NotificationPage(BaseModel):
    items: list[Notification]
    unread_count: int
