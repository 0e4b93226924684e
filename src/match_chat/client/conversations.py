from __future__ import annotations

from typing import Any, Callable

from match_chat.client.api import ChatApiClient
from match_chat.client.events import EventBus
from match_chat.client.models import Conversation
from match_chat.client.throttle import RetryGate
from match_chat.infrastructure.ws.protocol import ServerEvent


class ConversationList:
    """The caller's matches with last message and unread count, refreshed on new messages."""

    def __init__(
        self,
        api: ChatApiClient,
        bus: EventBus,
        *,
        min_interval: float = 2.0,
        backoff: float = 5.0,
    ) -> None:
        self.items: list[Conversation] = []
        self._api = api
        self._gate: RetryGate[list[Conversation]] = RetryGate(
            self._fetch, min_interval=min_interval, backoff=backoff,
        )
        self._unsubscribe: Callable[[], None] = bus.subscribe(
            ServerEvent.NEW_MESSAGE, self._on_new_message,
        )

    async def refresh(self) -> None:
        await self._gate.trigger()

    async def close(self) -> None:
        self._unsubscribe()
        await self._gate.aclose()

    @property
    def total_unread(self) -> int:
        return sum(c.unread_count for c in self.items)

    async def _fetch(self) -> list[Conversation]:
        self.items = await self._api.list_conversations()
        return self.items

    async def _on_new_message(self, _data: Any) -> None:
        await self.refresh()
