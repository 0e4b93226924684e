from __future__ import annotations

import uuid

from match_chat.application.dto.principal import Principal
from match_chat.application.exceptions import InvalidContentError, ValidationError
from match_chat.application.policies.permissions import assert_match_access, assert_match_active
from match_chat.application.ports.clock import Clock, SystemClock
from match_chat.application.uow import UnitOfWork
from match_chat.domain.entities.message import Message
from match_chat.domain.value_objects.enums import MessageType

MAX_CONTENT_LENGTH = 1000

_clock = SystemClock()


def validate_content(content: str | None) -> str:
    """Return the trimmed content or raise InvalidContentError."""
    text = (content or "").strip()
    if not text:
        raise InvalidContentError("Message content must not be empty")
    if len(text) > MAX_CONTENT_LENGTH:
        raise InvalidContentError(
            f"Message content exceeds {MAX_CONTENT_LENGTH} characters"
        )
    return text


def parse_message_type(raw: str | None) -> MessageType:
    try:
        return MessageType(raw or MessageType.TEXT)
    except ValueError as exc:
        raise ValidationError(f"Unsupported message type: {raw}") from exc


async def send_message(
    match_id: uuid.UUID,
    principal: Principal,
    content: str | None,
    msg_type: MessageType | str | None,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> Message:
    """Authorize, validate and persist a message.

    The commit at the end is the durability boundary: once this returns the
    message is stored regardless of what happens to its delivery.
    """
    match = await uow.matches.get_by_id(match_id)
    match = assert_match_access(principal, match)
    assert_match_active(match)
    text = validate_content(content)
    message_type = parse_message_type(msg_type)

    msg = Message(
        id=uuid.uuid4(),
        match_id=match_id,
        sender_id=principal.user_id,
        receiver_id=match.other_participant(principal.user_id),
        type=message_type.value,
        content=text,
        is_read=False,
        created_at=clock.now(),
    )
    msg = await uow.messages_w.create(msg)
    await uow.matches_w.touch_last_message_at(match_id, msg.created_at)
    await uow.commit()
    return msg


async def list_messages(
    match_id: uuid.UUID,
    principal: Principal,
    before_seq: int | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    match = await uow.matches.get_by_id(match_id)
    assert_match_access(principal, match)
    return await uow.messages.list_messages(
        match_id, before_seq=before_seq, limit=limit,
    )
