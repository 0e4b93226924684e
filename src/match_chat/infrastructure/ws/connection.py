from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Iterable, Protocol
from uuid import UUID

from match_chat.application.dto.principal import Principal
from match_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT = 5.0


class TextSocket(Protocol):
    async def send_text(self, data: str) -> None: ...


class Connection:
    """One authenticated realtime session.

    Holds the owning principal, the match channels it joined and a liveness
    flag. Sending is best effort: a failed or stalled write marks the
    connection dead and never raises to the caller.
    """

    def __init__(
        self,
        socket: TextSocket,
        principal: Principal,
        *,
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.principal = principal
        self.channels: set[UUID] = set()
        self.connected = True
        self._socket = socket
        self._send_timeout = send_timeout

    @property
    def user_id(self) -> int:
        return self.principal.user_id

    async def send(self, event_type: str, data: dict[str, Any]) -> bool:
        if not self.connected:
            return False
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        try:
            await asyncio.wait_for(self._socket.send_text(raw), self._send_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "WS send to %r stalled for %.1fs, marking dead", self, self._send_timeout,
            )
            self.connected = False
            return False
        except Exception:
            logger.debug("WS send failed on %s, marking dead", self.id, exc_info=True)
            self.connected = False
            return False
        return True

    def __repr__(self) -> str:
        return f"<Connection {self.id} user={self.user_id}>"


async def broadcast(
    connections: Iterable[Connection], event_type: str, data: dict[str, Any]
) -> int:
    """Send to all connections concurrently. Returns the number delivered."""
    results = await asyncio.gather(*(c.send(event_type, data) for c in connections))
    return sum(results)
