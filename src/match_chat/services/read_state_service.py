from __future__ import annotations

import uuid
from datetime import datetime

from match_chat.application.dto.principal import Principal
from match_chat.application.policies.permissions import assert_match_access
from match_chat.application.ports.clock import Clock, SystemClock
from match_chat.application.uow import UnitOfWork

_clock = SystemClock()


async def mark_read(
    match_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> tuple[int, datetime]:
    """Mark every unread message the principal received in this match as read.

    Returns (updated_count, read_at).
    """
    match = await uow.matches.get_by_id(match_id)
    assert_match_access(principal, match)
    read_at = clock.now()
    updated = await uow.messages_w.mark_read_for_receiver(
        match_id, principal.user_id, read_at,
    )
    if updated:
        await uow.commit()
    return updated, read_at
