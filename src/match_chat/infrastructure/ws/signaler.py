"""Ephemeral typing indicators and read receipts."""
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from match_chat.application.dto.principal import Principal
from match_chat.application.ports.clock import Clock, SystemClock
from match_chat.application.uow import UnitOfWork, UoWFactory
from match_chat.infrastructure.ws.channels import ChannelRouter
from match_chat.infrastructure.ws.connection import Connection, broadcast
from match_chat.infrastructure.ws.locks import ChannelLocks
from match_chat.infrastructure.ws.protocol import ServerEvent
from match_chat.services import read_state_service

logger = logging.getLogger(__name__)


class Signaler:
    def __init__(
        self,
        router: ChannelRouter,
        locks: ChannelLocks,
        uow_factory: UoWFactory,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._router = router
        self._locks = locks
        self._uow_factory = uow_factory
        self._clock = clock or SystemClock()

    async def start_typing(self, connection: Connection, match_id: UUID) -> int:
        return await self._typing(connection, match_id, True)

    async def stop_typing(self, connection: Connection, match_id: UUID) -> int:
        return await self._typing(connection, match_id, False)

    async def _typing(self, connection: Connection, match_id: UUID, is_typing: bool) -> int:
        # Never persisted; silently dropped when the sender is not in the channel.
        if not self._router.is_member(connection, match_id):
            return 0
        data = {
            "userId": connection.user_id,
            "matchId": str(match_id),
            "isTyping": is_typing,
        }
        return await broadcast(
            self._router.get(match_id).others(connection), ServerEvent.USER_TYPING, data,
        )

    async def mark_read(
        self,
        principal: Principal,
        match_id: UUID,
        *,
        exclude: Connection | None = None,
        uow: UnitOfWork | None = None,
    ) -> tuple[int, datetime]:
        """Persist read state for everything the principal received, then broadcast it.

        Returns (updated_count, read_at).
        """
        async with self._locks.hold(match_id):
            if uow is None:
                async with self._uow_factory() as own_uow:
                    updated, read_at = await read_state_service.mark_read(
                        match_id, principal, own_uow, clock=self._clock,
                    )
            else:
                updated, read_at = await read_state_service.mark_read(
                    match_id, principal, uow, clock=self._clock,
                )

            data = {
                "matchId": str(match_id),
                "readerId": principal.user_id,
                "readAt": read_at.isoformat(),
            }
            await broadcast(
                (c for c in self._router.members(match_id) if c is not exclude),
                ServerEvent.MESSAGES_READ,
                data,
            )
        logger.debug(
            "User %d marked %d message(s) read in match %s",
            principal.user_id, updated, match_id,
        )
        return updated, read_at
