"""Match channel membership."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from match_chat.application.exceptions import ConnectionLostError, UnauthorizedError
from match_chat.application.policies.permissions import assert_match_access
from match_chat.application.uow import UoWFactory
from match_chat.infrastructure.ws.connection import Connection

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Channel:
    match_id: UUID
    participants: frozenset[int]
    members: set[Connection] = field(default_factory=set)

    def others(self, connection: Connection) -> list[Connection]:
        return [c for c in self.members if c is not connection]


class ChannelRouter:
    """Maps a match id to the connections currently joined to it.

    Channels are created on the first successful join and dropped once empty;
    they are a view over the match, never persisted.
    """

    def __init__(self, uow_factory: UoWFactory) -> None:
        self._uow_factory = uow_factory
        self._channels: dict[UUID, Channel] = {}

    def get(self, match_id: UUID) -> Channel | None:
        return self._channels.get(match_id)

    def members(self, match_id: UUID) -> list[Connection]:
        channel = self._channels.get(match_id)
        return list(channel.members) if channel else []

    def participants(self, match_id: UUID) -> frozenset[int]:
        channel = self._channels.get(match_id)
        return channel.participants if channel else frozenset()

    def is_member(self, connection: Connection, match_id: UUID) -> bool:
        channel = self._channels.get(match_id)
        return channel is not None and connection in channel.members

    async def join(self, connection: Connection, match_id: UUID) -> Channel:
        """Add the connection to the channel; raise if its user is not a participant."""
        channel = self._channels.get(match_id)
        if channel is None:
            async with self._uow_factory() as uow:
                match = await uow.matches.get_by_id(match_id)
            match = assert_match_access(connection.principal, match)
            if not connection.connected:
                raise ConnectionLostError("Connection closed before join completed")
            # Another join may have created it while we were loading the match.
            channel = self._channels.setdefault(
                match_id, Channel(match_id=match_id, participants=match.participants),
            )
        elif connection.user_id not in channel.participants:
            raise UnauthorizedError("Not a participant of this match")

        if connection not in channel.members:
            channel.members.add(connection)
            connection.channels.add(match_id)
            logger.info("User %d joined match %s", connection.user_id, match_id)
        return channel

    def leave(self, connection: Connection, match_id: UUID) -> bool:
        """Remove the connection; a no-op returning False if it was not joined."""
        connection.channels.discard(match_id)
        channel = self._channels.get(match_id)
        if channel is None or connection not in channel.members:
            return False
        channel.members.discard(connection)
        if not channel.members:
            del self._channels[match_id]
        logger.info("User %d left match %s", connection.user_id, match_id)
        return True

    def leave_all(self, connection: Connection) -> list[UUID]:
        left = [mid for mid in list(connection.channels) if self.leave(connection, mid)]
        connection.channels.clear()
        return left

    def __len__(self) -> int:
        return len(self._channels)
