from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from match_chat.api.deps import get_verifier
from match_chat.application.dto.principal import Principal
from match_chat.config import settings
from match_chat.infrastructure.ws.connection import Connection
from match_chat.infrastructure.ws.hub import RealtimeHub
from match_chat.infrastructure.ws.protocol import ServerEvent, WsInbound

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


async def _authenticate(token: str | None) -> Principal | None:
    if not token:
        return None
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


def _bearer_from_headers(websocket: WebSocket) -> str | None:
    header = websocket.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    return value if scheme.lower() == "bearer" and value else None


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str | None = Query(None),
) -> None:
    principal = await _authenticate(token or _bearer_from_headers(websocket))
    if principal is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    hub: RealtimeHub = websocket.app.state.hub
    await websocket.accept()
    connection = await hub.connect(websocket, principal)

    heartbeat_task = asyncio.create_task(
        _heartbeat(connection), name=f"ws-heartbeat-{connection.id}",
    )
    try:
        await _read_loop(websocket, hub, connection)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", principal.principal_key)
    finally:
        heartbeat_task.cancel()
        await hub.disconnect(connection)


async def _heartbeat(connection: Connection) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    while connection.connected:
        await asyncio.sleep(interval)
        await connection.send(ServerEvent.PONG, {})


async def _read_loop(ws: WebSocket, hub: RealtimeHub, connection: Connection) -> None:
    # Events of one connection are handled strictly in arrival order.
    while True:
        raw = await ws.receive_text()
        try:
            event = WsInbound.model_validate_json(raw)
        except PydanticValidationError:
            await connection.send(
                ServerEvent.ERROR, {"code": "invalid_payload", "detail": "Malformed event"},
            )
            continue
        await hub.dispatch(connection, event)
