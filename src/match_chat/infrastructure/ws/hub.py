from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from match_chat.application.dto.principal import Principal
from match_chat.application.exceptions import AppError, ValidationError
from match_chat.application.ports.clock import Clock
from match_chat.application.uow import UoWFactory
from match_chat.infrastructure.ws.channels import ChannelRouter
from match_chat.infrastructure.ws.connection import (
    DEFAULT_SEND_TIMEOUT,
    Connection,
    TextSocket,
)
from match_chat.infrastructure.ws.locks import ChannelLocks
from match_chat.infrastructure.ws.presence import PresenceRegistry
from match_chat.infrastructure.ws.protocol import (
    ClientEvent,
    ServerEvent,
    WsInbound,
    match_id_from,
)
from match_chat.infrastructure.ws.relay import MessageRelay
from match_chat.infrastructure.ws.signaler import Signaler
from match_chat.services import presence_service

logger = logging.getLogger(__name__)

Handler = Callable[[Connection, Any], Awaitable[None]]


class RealtimeHub:
    """Per-process realtime state: presence, channels, relay and signaling.

    Connections and channels live only in this process; anything that must
    survive a restart goes through the unit of work.
    """

    def __init__(
        self,
        uow_factory: UoWFactory,
        *,
        clock: Clock | None = None,
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
    ) -> None:
        self._uow_factory = uow_factory
        self._send_timeout = send_timeout
        self.presence = PresenceRegistry()
        self.router = ChannelRouter(uow_factory)
        self.locks = ChannelLocks()
        self.relay = MessageRelay(
            self.router, self.presence, self.locks, uow_factory, clock=clock,
        )
        self.signaler = Signaler(self.router, self.locks, uow_factory, clock=clock)
        self._handlers: dict[str, Handler] = {
            ClientEvent.JOIN_MATCH: self._on_join,
            ClientEvent.LEAVE_MATCH: self._on_leave,
            ClientEvent.SEND_MESSAGE: self._on_send,
            ClientEvent.TYPING_START: self._on_typing_start,
            ClientEvent.TYPING_STOP: self._on_typing_stop,
            ClientEvent.MARK_MESSAGES_READ: self._on_mark_read,
            ClientEvent.PING: self._on_ping,
        }

    async def connect(self, socket: TextSocket, principal: Principal) -> Connection:
        connection = Connection(socket, principal, send_timeout=self._send_timeout)
        if self.presence.register(connection):
            await self._record_presence(principal.user_id, True)
        logger.info("WS connected: %r", connection)
        return connection

    async def disconnect(self, connection: Connection) -> None:
        connection.connected = False
        self.router.leave_all(connection)
        if self.presence.unregister(connection):
            await self._record_presence(connection.user_id, False)
        logger.info("WS disconnected: %r", connection)

    async def push_to_user(self, user_id: int, event_type: str, data: dict[str, Any]) -> int:
        return await self.presence.send_to_user(user_id, event_type, data)

    async def dispatch(self, connection: Connection, event: WsInbound) -> None:
        """Run one inbound event; failures go back to the originating connection only."""
        handler = self._handlers.get(event.type)
        if handler is None:
            await self._send_error(
                connection, event, "unknown_type", f"Unknown event: {event.type}",
            )
            return
        try:
            await handler(connection, event.data)
        except AppError as exc:
            await self._send_error(connection, event, exc.code, exc.detail)
        except Exception:
            logger.exception("WS event %s failed for %r", event.type, connection)
            code = "send_failed" if event.type == ClientEvent.SEND_MESSAGE else "internal_error"
            await self._send_error(connection, event, code, "Internal error")

    async def _send_error(
        self, connection: Connection, event: WsInbound, code: str, detail: str,
    ) -> None:
        data: dict[str, Any] = {"code": code, "detail": detail, "event": event.type}
        # Echo the match id back so the client can tie the failure to a chat.
        raw = event.data.get("matchId") if isinstance(event.data, dict) else event.data
        if isinstance(raw, str) and raw:
            data["matchId"] = raw
        await connection.send(ServerEvent.ERROR, data)

    async def _record_presence(self, user_id: int, is_online: bool) -> None:
        try:
            async with self._uow_factory() as uow:
                await presence_service.record_presence(user_id, is_online, uow)
        except Exception:
            logger.exception("Failed to record presence for user %d", user_id)

    async def _on_join(self, connection: Connection, data: Any) -> None:
        match_id = match_id_from(data)
        await self.router.join(connection, match_id)
        await connection.send(ServerEvent.JOINED, {"matchId": str(match_id)})

    async def _on_leave(self, connection: Connection, data: Any) -> None:
        self.router.leave(connection, match_id_from(data))

    async def _on_send(self, connection: Connection, data: Any) -> None:
        if not isinstance(data, dict):
            raise ValidationError("send_message expects an object")
        await self.relay.send_message(
            connection,
            match_id_from(data),
            data.get("content"),
            data.get("messageType"),
        )

    async def _on_typing_start(self, connection: Connection, data: Any) -> None:
        await self.signaler.start_typing(connection, match_id_from(data))

    async def _on_typing_stop(self, connection: Connection, data: Any) -> None:
        await self.signaler.stop_typing(connection, match_id_from(data))

    async def _on_mark_read(self, connection: Connection, data: Any) -> None:
        await self.signaler.mark_read(
            connection.principal, match_id_from(data), exclude=connection,
        )

    async def _on_ping(self, connection: Connection, _data: Any) -> None:
        await connection.send(ServerEvent.PONG, {})
