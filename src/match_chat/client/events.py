"""In-process publish/subscribe for client components."""
from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

# Transport lifecycle; server events are published under their wire names.
CONNECTED = "connected"
DISCONNECTED = "disconnected"
AUTH_FAILED = "auth_failed"
SEND_FAILED = "send_failed"

Handler = Callable[[Any], Awaitable[None] | None]


class EventBus:
    """Named-event fan-out. A failing subscriber is logged and never stops the others."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers.get(event, ()):
                self._handlers[event].remove(handler)

        return unsubscribe

    async def publish(self, event: str, data: Any = None) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                result = handler(data)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Subscriber of %s failed", event)

    def subscriber_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))
