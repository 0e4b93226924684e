from __future__ import annotations

from match_chat.application.dto.conversation import ConversationSummaryDTO
from match_chat.application.dto.principal import Principal
from match_chat.application.uow import UnitOfWork


async def list_user_conversations(
    principal: Principal,
    uow: UnitOfWork,
) -> list[ConversationSummaryDTO]:
    """Active matches of the caller with last message and unread count.

    Most recent activity first; a match without messages counts from matched_at.
    """
    matches = await uow.matches.list_active_for_user(principal.user_id)
    summaries: list[ConversationSummaryDTO] = []
    for match in matches:
        last_message = await uow.messages.get_last(match.id)
        unread = await uow.messages.count_unread(match.id, principal.user_id)
        summaries.append(
            ConversationSummaryDTO(
                match_id=match.id,
                other_user_id=match.other_participant(principal.user_id),
                last_message=last_message,
                unread_count=unread,
                last_activity=match.last_message_at or match.matched_at,
            )
        )
    summaries.sort(key=lambda s: s.last_activity, reverse=True)
    return summaries
