from __future__ import annotations

from fastapi import APIRouter

from match_chat.api.deps import CurrentPrincipal, UoWDep
from match_chat.api.v1.schemas.conversation import ConversationResponse
from match_chat.services import conversation_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationResponse]:
    summaries = await conversation_service.list_user_conversations(principal, uow)
    return [ConversationResponse.model_validate(s, from_attributes=True) for s in summaries]
