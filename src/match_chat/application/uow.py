from __future__ import annotations

from typing import AsyncContextManager, Callable, Protocol

from match_chat.application.repositories.match import MatchReader, MatchWriter
from match_chat.application.repositories.message import MessageReader, MessageWriter
from match_chat.application.repositories.notification import (
    NotificationReader,
    NotificationWriter,
)
from match_chat.application.repositories.user_activity import UserActivityWriter


class UnitOfWork(Protocol):
    matches: MatchReader
    matches_w: MatchWriter
    messages: MessageReader
    messages_w: MessageWriter
    notifications: NotificationReader
    notifications_w: NotificationWriter
    activity_w: UserActivityWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


# Opens a fresh unit of work per realtime event (no request scope on sockets).
UoWFactory = Callable[[], AsyncContextManager[UnitOfWork]]
