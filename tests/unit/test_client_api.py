from __future__ import annotations

import json
import uuid

import httpx
import pytest

from match_chat.application.exceptions import (
    ConnectionLostError,
    InvalidContentError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)
from match_chat.client.api import ChatApiClient
from match_chat.infrastructure.ws.protocol import message_payload
from tests.conftest import make_message


def _client(handler) -> ChatApiClient:
    return ChatApiClient("http://chat.test", "tok", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_messages_sends_auth_and_cursor():
    msg = make_message(seq=5)
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[message_payload(msg)])

    async with _client(handler) as api:
        [loaded] = await api.get_messages(msg.match_id, limit=20, before=9)

    assert loaded.id == msg.id
    assert loaded.seq == 5
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.url.path == f"/api/v1/chat/matches/{msg.match_id}/messages"
    assert request.url.params["before"] == "9"
    assert request.url.params["limit"] == "20"


@pytest.mark.asyncio
async def test_send_message_body():
    msg = make_message(content="hi")
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json=message_payload(msg))

    async with _client(handler) as api:
        sent = await api.send_message(msg.match_id, "hi", "gif")

    assert bodies == [{"content": "hi", "messageType": "gif"}]
    assert sent.content == "hi"


@pytest.mark.asyncio
@pytest.mark.parametrize("status, exc", [
    (401, UnauthorizedError),
    (403, UnauthorizedError),
    (404, NotFoundError),
    (422, InvalidContentError),
    (400, InvalidContentError),
])
async def test_error_mapping(status, exc):
    async with _client(lambda r: httpx.Response(status, json={"detail": "nope"})) as api:
        with pytest.raises(exc, match="nope"):
            await api.list_conversations()


@pytest.mark.asyncio
async def test_rate_limited_carries_retry_after():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, headers={"Retry-After": "7"}, json={"detail": "busy"})

    async with _client(handler) as api:
        with pytest.raises(RateLimitedError) as info:
            await api.list_notifications()

    assert info.value.retry_after == 7.0


@pytest.mark.asyncio
async def test_server_error_raises_httpx_error():
    async with _client(lambda r: httpx.Response(500, text="boom")) as api:
        with pytest.raises(httpx.HTTPStatusError):
            await api.unread_count()


@pytest.mark.asyncio
async def test_transport_failure_is_connection_lost():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as api:
        with pytest.raises(ConnectionLostError):
            await api.mark_notification_read(uuid.uuid4())
