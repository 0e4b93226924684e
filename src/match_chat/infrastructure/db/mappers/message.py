from __future__ import annotations

from typing import Any

from match_chat.domain.entities.message import Message
from match_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        match_id=model.match_id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        type=model.type,
        content=model.content,
        is_read=model.is_read,
        created_at=model.created_at,
        read_at=model.read_at,
        seq=model.seq,
    )


def entity_to_values(entity: Message) -> dict[str, Any]:
    """Insert values; ``seq`` is left to the identity column."""
    return {
        "id": entity.id,
        "match_id": entity.match_id,
        "sender_id": entity.sender_id,
        "receiver_id": entity.receiver_id,
        "type": entity.type,
        "content": entity.content,
        "is_read": entity.is_read,
        "read_at": entity.read_at,
        "created_at": entity.created_at,
    }
