"""WebSocket message envelope models and event names."""
from __future__ import annotations

from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from match_chat.application.exceptions import ValidationError
from match_chat.domain.entities.message import Message


class ClientEvent(StrEnum):
    JOIN_MATCH = "join_match"
    LEAVE_MATCH = "leave_match"
    SEND_MESSAGE = "send_message"
    TYPING_START = "typing_start"
    TYPING_STOP = "typing_stop"
    MARK_MESSAGES_READ = "mark_messages_read"
    PING = "ping"


class ServerEvent(StrEnum):
    NEW_MESSAGE = "new_message"
    USER_TYPING = "user_typing"
    MESSAGES_READ = "messages_read"
    MATCH_NOTIFICATION = "matchNotification"
    MESSAGE_NOTIFICATION = "messageNotification"
    MESSAGE_PREVIEW = "message_notification"
    JOINED = "joined"
    ERROR = "error"
    PONG = "pong"


class WsInbound(BaseModel):
    """Client → Server."""

    type: str
    # join_match / leave_match send a bare match id, everything else an object
    data: Any = None


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str
    data: dict[str, Any] = {}


def match_id_from(data: Any) -> UUID:
    """Extract the match id from a bare string or a ``{matchId}`` object."""
    raw = data.get("matchId") if isinstance(data, dict) else data
    if not raw:
        raise ValidationError("matchId is required")
    try:
        return UUID(str(raw))
    except ValueError as exc:
        raise ValidationError(f"Invalid matchId: {raw}") from exc


def message_payload(msg: Message) -> dict[str, Any]:
    """JSON-safe message body, same field names as the REST MessageResponse."""
    return {
        "id": str(msg.id),
        "match_id": str(msg.match_id),
        "sender_id": msg.sender_id,
        "receiver_id": msg.receiver_id,
        "type": msg.type,
        "content": msg.content,
        "is_read": msg.is_read,
        "read_at": msg.read_at.isoformat() if msg.read_at else None,
        "created_at": msg.created_at.isoformat(),
        "seq": msg.seq,
    }
