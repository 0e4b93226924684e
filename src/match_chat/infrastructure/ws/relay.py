"""Persist-then-fan-out message path shared by the socket and REST transports."""
from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from match_chat.application.dto.principal import Principal
from match_chat.application.ports.clock import Clock, SystemClock
from match_chat.application.uow import UnitOfWork, UoWFactory
from match_chat.domain.entities.message import Message
from match_chat.domain.value_objects.enums import MessageType, NotificationType
from match_chat.infrastructure.ws.channels import ChannelRouter
from match_chat.infrastructure.ws.connection import Connection, broadcast
from match_chat.infrastructure.ws.locks import ChannelLocks
from match_chat.infrastructure.ws.presence import PresenceRegistry
from match_chat.infrastructure.ws.protocol import ServerEvent, message_payload
from match_chat.services import message_service, notification_service

logger = logging.getLogger(__name__)


class MessageRelay:
    """Accepts a message, persists it, then delivers it to the match channel.

    Within one match the persist + fan-out pair runs under the channel lock,
    so every joined connection observes messages in persistence order.
    """

    def __init__(
        self,
        router: ChannelRouter,
        presence: PresenceRegistry,
        locks: ChannelLocks,
        uow_factory: UoWFactory,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._router = router
        self._presence = presence
        self._locks = locks
        self._uow_factory = uow_factory
        self._clock = clock or SystemClock()

    async def send_message(
        self,
        connection: Connection,
        match_id: UUID,
        content: str | None,
        message_type: MessageType | str | None = None,
    ) -> Message:
        return await self.submit(connection.principal, match_id, content, message_type)

    async def submit(
        self,
        principal: Principal,
        match_id: UUID,
        content: str | None,
        message_type: MessageType | str | None = None,
        uow: UnitOfWork | None = None,
    ) -> Message:
        """Persist and fan out. Raises before any delivery if persisting fails."""
        async with self._locks.hold(match_id):
            if uow is None:
                # A dropped sender must not abort a write already in flight.
                message = await asyncio.shield(
                    self._persist(principal, match_id, content, message_type)
                )
            else:
                message = await message_service.send_message(
                    match_id, principal, content, message_type, uow, clock=self._clock,
                )
            await self._fan_out(message)
        await self._notify_receiver(message, uow)
        return message

    async def _persist(
        self,
        principal: Principal,
        match_id: UUID,
        content: str | None,
        message_type: MessageType | str | None,
    ) -> Message:
        async with self._uow_factory() as uow:
            return await message_service.send_message(
                match_id, principal, content, message_type, uow, clock=self._clock,
            )

    async def _fan_out(self, message: Message) -> int:
        data = {"message": message_payload(message), "matchId": str(message.match_id)}
        delivered = await broadcast(
            self._router.members(message.match_id), ServerEvent.NEW_MESSAGE, data,
        )
        logger.info(
            "Message %s (seq=%d) in match %s delivered to %d connection(s)",
            message.id, message.seq, message.match_id, delivered,
        )
        return delivered

    async def _notify_receiver(self, message: Message, uow: UnitOfWork | None) -> None:
        try:
            if uow is None:
                async with self._uow_factory() as own_uow:
                    await notification_service.create_message_notification(message, own_uow)
            else:
                await notification_service.create_message_notification(message, uow)
        except Exception:
            logger.exception("Failed to create notification for message %s", message.id)

        await self._presence.send_to_user(
            message.receiver_id,
            ServerEvent.MESSAGE_NOTIFICATION,
            {
                "type": NotificationType.MESSAGE.value,
                "matchId": str(message.match_id),
                "senderId": message.sender_id,
            },
        )

        receiver_conns = self._presence.connections_for(message.receiver_id)
        if any(message.match_id in c.channels for c in receiver_conns):
            return
        # Receiver is not looking at this chat: push a short preview as well.
        await broadcast(
            receiver_conns,
            ServerEvent.MESSAGE_PREVIEW,
            {
                "matchId": str(message.match_id),
                "message": {
                    "content": notification_service.preview(message.content),
                    "senderId": message.sender_id,
                    "createdAt": message.created_at.isoformat(),
                },
            },
        )
