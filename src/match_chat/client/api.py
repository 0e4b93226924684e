"""REST client for the chat endpoints."""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Self
from uuid import UUID

import httpx

from match_chat.application.exceptions import (
    ConnectionLostError,
    InvalidContentError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)
from match_chat.client.models import ChatMessage, Conversation, NotificationPage

logger = logging.getLogger(__name__)


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    try:
        return float(raw) if raw else None
    except ValueError:
        return None


def raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    status = response.status_code
    detail = _detail(response)
    if status == 429:
        raise RateLimitedError(detail, retry_after=_retry_after(response))
    if status in (401, 403):
        raise UnauthorizedError(detail)
    if status == 404:
        raise NotFoundError(detail)
    if status in (400, 422):
        raise InvalidContentError(detail)
    response.raise_for_status()


class ChatApiClient:
    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ConnectionLostError(str(exc)) from exc
        raise_for_status(response)
        return response

    async def list_conversations(self) -> list[Conversation]:
        response = await self._request("GET", "/api/v1/chat/conversations")
        return [Conversation.model_validate(c) for c in response.json()]

    async def get_messages(
        self,
        match_id: UUID,
        *,
        limit: int = 50,
        before: int | None = None,
    ) -> list[ChatMessage]:
        params: dict[str, Any] = {"limit": limit}
        if before is not None:
            params["before"] = before
        response = await self._request(
            "GET", f"/api/v1/chat/matches/{match_id}/messages", params=params,
        )
        return [ChatMessage.model_validate(m) for m in response.json()]

    async def send_message(
        self,
        match_id: UUID,
        content: str,
        message_type: str = "text",
    ) -> ChatMessage:
        response = await self._request(
            "POST",
            f"/api/v1/chat/matches/{match_id}/messages",
            json={"content": content, "messageType": message_type},
        )
        return ChatMessage.model_validate(response.json())

    async def list_notifications(self, *, limit: int = 20, skip: int = 0) -> NotificationPage:
        response = await self._request(
            "GET", "/api/v1/users/notifications", params={"limit": limit, "skip": skip},
        )
        return NotificationPage.model_validate(response.json())

    async def unread_count(self) -> int:
        response = await self._request("GET", "/api/v1/users/notifications/unread-count")
        return int(response.json()["unread_count"])

    async def mark_notification_read(self, notification_id: UUID) -> None:
        await self._request("PUT", f"/api/v1/users/notifications/{notification_id}/read")

    async def mark_all_notifications_read(self) -> int:
        response = await self._request("PUT", "/api/v1/users/notifications/read-all")
        return int(response.json()["updated"])
