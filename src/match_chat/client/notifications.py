from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable
from uuid import UUID

from match_chat.client.api import ChatApiClient
from match_chat.client.events import EventBus
from match_chat.client.models import Notification, NotificationPage
from match_chat.client.throttle import RetryGate
from match_chat.infrastructure.ws.protocol import ServerEvent

logger = logging.getLogger(__name__)


class NotificationFeed:
    """Notification list and unread badge.

    Refreshes on match / message notification events and on a slow poll, all
    through one RetryGate so bursts cost a single request.
    """

    def __init__(
        self,
        api: ChatApiClient,
        bus: EventBus,
        *,
        limit: int = 20,
        min_interval: float = 2.0,
        backoff: float = 5.0,
        poll_interval: float = 30.0,
    ) -> None:
        self.items: list[Notification] = []
        self.unread_count = 0
        self._api = api
        self._limit = limit
        self._poll_interval = poll_interval
        self._gate: RetryGate[NotificationPage] = RetryGate(
            self._fetch, min_interval=min_interval, backoff=backoff,
        )
        self._poller: asyncio.Task[None] | None = None
        self._unsubscribe: list[Callable[[], None]] = [
            bus.subscribe(ServerEvent.MATCH_NOTIFICATION, self._on_notification),
            bus.subscribe(ServerEvent.MESSAGE_NOTIFICATION, self._on_notification),
        ]

    @property
    def gate(self) -> RetryGate[NotificationPage]:
        return self._gate

    async def start(self) -> None:
        await self.refresh()
        self._poller = asyncio.create_task(self._poll(), name="notification-poll")

    async def stop(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        if self._poller is not None:
            self._poller.cancel()
            try:
                await self._poller
            except asyncio.CancelledError:
                pass
            self._poller = None
        await self._gate.aclose()

    async def refresh(self) -> None:
        await self._gate.trigger()

    async def mark_read(self, notification_id: UUID) -> None:
        await self._api.mark_notification_read(notification_id)
        for i, item in enumerate(self.items):
            if item.id == notification_id and not item.is_read:
                self.items[i] = item.model_copy(update={"is_read": True})
                self.unread_count = max(0, self.unread_count - 1)

    async def mark_all_read(self) -> None:
        await self._api.mark_all_notifications_read()
        self.items = [n.model_copy(update={"is_read": True}) for n in self.items]
        self.unread_count = 0

    async def _fetch(self) -> NotificationPage:
        page = await self._api.list_notifications(limit=self._limit)
        self.items = page.items
        self.unread_count = page.unread_count
        return page

    async def _on_notification(self, _data: Any) -> None:
        await self.refresh()

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                await self.refresh()
            except Exception:
                logger.exception("Notification poll failed")
