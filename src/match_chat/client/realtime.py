"""Socket client: sends chat events and republishes server events on the bus."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable
from urllib.parse import urlencode
from uuid import UUID

import websockets
from pydantic import ValidationError as PydanticValidationError
from websockets.exceptions import ConnectionClosed, InvalidStatus, WebSocketException

from match_chat.application.exceptions import UnauthorizedError
from match_chat.client.events import AUTH_FAILED, CONNECTED, DISCONNECTED, EventBus
from match_chat.infrastructure.ws.protocol import ClientEvent, WsInbound, WsOutbound

logger = logging.getLogger(__name__)

_AUTH_REJECTED = {401, 403}


class RealtimeClient:
    """Keeps one socket open to ``/ws/chat``, reconnecting with capped exponential backoff.

    Outbound calls return False while disconnected instead of raising; callers
    fall back to REST or wait for the next ``connected`` event to resync.
    """

    def __init__(
        self,
        url: str,
        token: str,
        bus: EventBus,
        *,
        connect: Callable[[str], Any] = websockets.connect,
        initial_backoff: float = 1.0,
        max_backoff: float = 30.0,
    ) -> None:
        self._url = f"{url}?{urlencode({'token': token})}"
        self._bus = bus
        self._connect = connect
        self._initial_backoff = initial_backoff
        self._max_backoff = max_backoff
        self._ws: Any = None
        self._task: asyncio.Task[None] | None = None
        self._closing = False

    @property
    def connected(self) -> bool:
        return self._ws is not None

    def start(self) -> None:
        self._closing = False
        self._task = asyncio.create_task(self._run(), name="realtime-client")

    async def stop(self) -> None:
        self._closing = True
        if self._ws is not None:
            await self._ws.close()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _run(self) -> None:
        backoff = self._initial_backoff
        while not self._closing:
            try:
                async with self._connect(self._url) as ws:
                    self._ws = ws
                    backoff = self._initial_backoff
                    logger.info("Realtime connected")
                    await self._bus.publish(CONNECTED)
                    async for raw in ws:
                        await self._dispatch(raw)
            except InvalidStatus as exc:
                if exc.response.status_code not in _AUTH_REJECTED:
                    logger.warning("Realtime handshake rejected: %s", exc)
                else:
                    # A rejected token will not get better by retrying.
                    logger.error("Realtime handshake refused: %s", exc)
                    self._closing = True
                    await self._bus.publish(
                        AUTH_FAILED, UnauthorizedError("Realtime authentication failed"),
                    )
            except (OSError, WebSocketException) as exc:
                logger.warning("Realtime connection lost: %s", exc)
            finally:
                if self._ws is not None:
                    self._ws = None
                    await self._bus.publish(DISCONNECTED)
            if self._closing:
                break
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, self._max_backoff)

    async def _dispatch(self, raw: str | bytes) -> None:
        try:
            event = WsOutbound.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("Dropping malformed realtime frame: %r", raw)
            return
        await self._bus.publish(event.type, event.data)

    async def _emit(self, event_type: str, data: Any) -> bool:
        ws = self._ws
        if ws is None:
            return False
        try:
            await ws.send(WsInbound(type=event_type, data=data).model_dump_json())
        except ConnectionClosed:
            return False
        return True

    async def join_match(self, match_id: UUID) -> bool:
        return await self._emit(ClientEvent.JOIN_MATCH, str(match_id))

    async def leave_match(self, match_id: UUID) -> bool:
        return await self._emit(ClientEvent.LEAVE_MATCH, str(match_id))

    async def send_message(self, match_id: UUID, content: str, message_type: str = "text") -> bool:
        return await self._emit(
            ClientEvent.SEND_MESSAGE,
            {"matchId": str(match_id), "content": content, "messageType": message_type},
        )

    async def start_typing(self, match_id: UUID) -> bool:
        return await self._emit(ClientEvent.TYPING_START, {"matchId": str(match_id)})

    async def stop_typing(self, match_id: UUID) -> bool:
        return await self._emit(ClientEvent.TYPING_STOP, {"matchId": str(match_id)})

    async def mark_messages_read(self, match_id: UUID) -> bool:
        return await self._emit(ClientEvent.MARK_MESSAGES_READ, {"matchId": str(match_id)})
