from __future__ import annotations

from match_chat.application.ports.clock import Clock, SystemClock
from match_chat.application.uow import UnitOfWork

_clock = SystemClock()


async def record_presence(
    user_id: int,
    is_online: bool,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> None:
    """Persist online/offline edge together with the last-active timestamp."""
    await uow.activity_w.set_online(user_id, is_online, clock.now())
    await uow.commit()
