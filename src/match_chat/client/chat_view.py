from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable
from uuid import UUID

from match_chat.application.exceptions import InvalidContentError
from match_chat.client.api import ChatApiClient
from match_chat.client.events import CONNECTED, SEND_FAILED, EventBus
from match_chat.client.models import ChatMessage
from match_chat.client.realtime import RealtimeClient
from match_chat.client.timeline import MessageTimeline
from match_chat.infrastructure.ws.protocol import ClientEvent, ServerEvent

logger = logging.getLogger(__name__)


class ChatView:
    """Client-side state of one open match chat.

    Opening loads history over REST and joins the channel; live
    ``new_message`` events are merged through the timeline, so a message seen
    both ways shows once. After a reconnect the view re-joins and re-fetches;
    nothing is replayed by the server.
    """

    def __init__(
        self,
        match_id: UUID,
        user_id: int,
        api: ChatApiClient,
        realtime: RealtimeClient,
        bus: EventBus,
        *,
        history_limit: int = 50,
    ) -> None:
        self.match_id = match_id
        self.user_id = user_id
        self.timeline = MessageTimeline()
        self.other_typing = False
        self.is_open = False
        self._api = api
        self._realtime = realtime
        self._bus = bus
        self._history_limit = history_limit
        self.send_errors: list[dict[str, Any]] = []
        self._typing = False
        self._unsubscribe: list[Callable[[], None]] = []

    async def open(self) -> None:
        if self.is_open:
            return
        self._unsubscribe = [
            self._bus.subscribe(ServerEvent.NEW_MESSAGE, self._on_new_message),
            self._bus.subscribe(ServerEvent.USER_TYPING, self._on_user_typing),
            self._bus.subscribe(ServerEvent.MESSAGES_READ, self._on_messages_read),
            self._bus.subscribe(ServerEvent.ERROR, self._on_error),
            self._bus.subscribe(CONNECTED, self._on_connected),
        ]
        self.is_open = True
        await self.resync()

    async def close(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self.is_open = False
        self.other_typing = False
        if self._typing:
            await self.set_typing(False)
        await self._realtime.leave_match(self.match_id)

    async def resync(self) -> None:
        """Join (when connected) before fetching so nothing sent in between is missed."""
        joined = await self._realtime.join_match(self.match_id)
        history = await self._api.get_messages(self.match_id, limit=self._history_limit)
        self.timeline.reset(history)
        if joined:
            await self._realtime.mark_messages_read(self.match_id)
        logger.debug("Chat %s synced: %d message(s)", self.match_id, len(self.timeline))

    async def load_older(self) -> int:
        before = self.timeline.oldest_seq
        if before is None:
            return 0
        older = await self._api.get_messages(
            self.match_id, limit=self._history_limit, before=before,
        )
        return sum(1 for m in older if self.timeline.add(m))

    async def send(self, content: str, message_type: str = "text") -> ChatMessage | None:
        """Send through the socket when connected, otherwise over REST.

        Returns the stored message for the REST path; the socket path returns
        None and the message arrives as ``new_message``.
        A rejected socket send shows up in ``send_errors`` and as a
        ``send_failed`` bus event.
        """
        text = content.strip()
        if not text:
            raise InvalidContentError("Message content must not be empty")
        if self._typing:
            await self.set_typing(False)
        if await self._realtime.send_message(self.match_id, text, message_type):
            return None
        msg = await self._api.send_message(self.match_id, text, message_type)
        self.timeline.add(msg)
        return msg

    async def set_typing(self, typing: bool) -> None:
        if typing == self._typing:
            return
        self._typing = typing
        if typing:
            await self._realtime.start_typing(self.match_id)
        else:
            await self._realtime.stop_typing(self.match_id)

    def _is_mine(self, data: Any) -> bool:
        return isinstance(data, dict) and data.get("matchId") == str(self.match_id)

    async def _on_new_message(self, data: Any) -> None:
        if not self._is_mine(data):
            return
        msg = ChatMessage.model_validate(data["message"])
        if not self.timeline.add(msg):
            return
        if msg.sender_id != self.user_id:
            self.other_typing = False
            if self.is_open:
                await self._realtime.mark_messages_read(self.match_id)

    def _on_user_typing(self, data: Any) -> None:
        if self._is_mine(data) and data.get("userId") != self.user_id:
            self.other_typing = bool(data.get("isTyping"))

    def _on_messages_read(self, data: Any) -> None:
        if self._is_mine(data) and data.get("readerId") != self.user_id:
            self.timeline.mark_read_by(
                data["readerId"], datetime.fromisoformat(data["readAt"]),
            )

    async def _on_error(self, data: Any) -> None:
        if not self._is_mine(data) or data.get("event") != ClientEvent.SEND_MESSAGE:
            return
        failure = {
            "matchId": data["matchId"],
            "code": data.get("code"),
            "detail": data.get("detail"),
        }
        self.send_errors.append(failure)
        logger.warning("Send in chat %s failed: %s", self.match_id, failure["code"])
        await self._bus.publish(SEND_FAILED, failure)

    async def _on_connected(self, _data: Any) -> None:
        if self.is_open:
            await self.resync()
