"""In-process presence registry."""
from __future__ import annotations

import logging
from typing import Any

from match_chat.infrastructure.ws.connection import Connection, broadcast

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Tracks live connections per user. A user is online while at least one is registered."""

    def __init__(self) -> None:
        self._connections: dict[int, set[Connection]] = {}

    def register(self, connection: Connection) -> bool:
        """Add a connection. Returns True when this brought the user online."""
        conns = self._connections.setdefault(connection.user_id, set())
        came_online = not conns
        conns.add(connection)
        logger.debug(
            "WS registered: %r (user connections=%d)", connection, len(conns),
        )
        return came_online

    def unregister(self, connection: Connection) -> bool:
        """Remove a connection. Returns True when it was the user's last one."""
        conns = self._connections.get(connection.user_id)
        if not conns or connection not in conns:
            return False
        conns.discard(connection)
        if conns:
            return False
        del self._connections[connection.user_id]
        logger.debug("User %d went offline", connection.user_id)
        return True

    def is_online(self, user_id: int) -> bool:
        return bool(self._connections.get(user_id))

    def connections_for(self, user_id: int) -> list[Connection]:
        return list(self._connections.get(user_id, ()))

    @property
    def online_count(self) -> int:
        return len(self._connections)

    async def send_to_user(self, user_id: int, event_type: str, data: dict[str, Any]) -> int:
        """Send to every connection of a user. Returns the number delivered."""
        return await broadcast(self.connections_for(user_id), event_type, data)
