from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from match_chat.api.deps import CurrentPrincipal, HubDep, UoWDep
from match_chat.api.v1.schemas.message import MessageResponse, SendMessageRequest
from match_chat.services import message_service

router = APIRouter(prefix="/api/v1/chat/matches", tags=["messages"])


@router.get("/{match_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    match_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
    before: int | None = Query(None, ge=1),
    limit: int = Query(50, ge=1, le=200),
) -> list[MessageResponse]:
    # Opening the history means the caller has seen it.
    await hub.signaler.mark_read(principal, match_id, uow=uow)
    messages = await message_service.list_messages(
        match_id, principal, before, limit, uow,
    )
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.post("/{match_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    match_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
) -> MessageResponse:
    msg = await hub.relay.submit(
        principal, match_id, body.content, body.message_type, uow=uow,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)
