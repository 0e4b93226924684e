from __future__ import annotations

import uuid

from match_chat.application.dto.notification import CreateNotificationDTO
from match_chat.application.dto.principal import Principal
from match_chat.application.exceptions import NotFoundError
from match_chat.application.ports.clock import Clock, SystemClock
from match_chat.application.uow import UnitOfWork
from match_chat.domain.entities.message import Message
from match_chat.domain.entities.notification import Notification
from match_chat.domain.events.like_created import LikeCreated
from match_chat.domain.events.match_created import MatchCreated
from match_chat.domain.value_objects.enums import NotificationType

PREVIEW_LENGTH = 50

_clock = SystemClock()


def preview(content: str) -> str:
    if len(content) > PREVIEW_LENGTH:
        return content[:PREVIEW_LENGTH] + "..."
    return content


async def create_notification(
    dto: CreateNotificationDTO,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> Notification:
    notification = Notification(
        id=uuid.uuid4(),
        recipient_id=dto.recipient_id,
        type=dto.type.value,
        title=dto.title,
        body=dto.body,
        is_read=False,
        created_at=clock.now(),
        data=dto.data or None,
    )
    notification = await uow.notifications_w.create(notification)
    await uow.commit()
    return notification


async def create_message_notification(message: Message, uow: UnitOfWork) -> Notification:
    return await create_notification(
        CreateNotificationDTO(
            recipient_id=message.receiver_id,
            type=NotificationType.MESSAGE,
            title="New message",
            body=preview(message.content),
            data={
                "match_id": str(message.match_id),
                "user_id": message.sender_id,
                "message_id": str(message.id),
            },
        ),
        uow,
    )


async def create_match_notifications(
    event: MatchCreated, uow: UnitOfWork
) -> list[Notification]:
    """One notification per side of the new match."""
    created = []
    for recipient, other in (
        (event.user1_id, event.user2_id),
        (event.user2_id, event.user1_id),
    ):
        created.append(
            await create_notification(
                CreateNotificationDTO(
                    recipient_id=recipient,
                    type=NotificationType.MATCH,
                    title="New Match!",
                    body="You have a new match!",
                    data={"match_id": str(event.match_id), "user_id": other},
                ),
                uow,
            )
        )
    return created


async def create_like_notification(event: LikeCreated, uow: UnitOfWork) -> Notification:
    if event.is_super:
        kind, title, body = (
            NotificationType.SUPER_LIKE, "Super Like!", "Someone super liked your profile!",
        )
    else:
        kind, title, body = NotificationType.LIKE, "New Like", "Someone liked your profile!"
    return await create_notification(
        CreateNotificationDTO(
            recipient_id=event.liked_id,
            type=kind,
            title=title,
            body=body,
            data={"user_id": event.liker_id},
        ),
        uow,
    )


async def list_notifications(
    principal: Principal,
    limit: int,
    skip: int,
    uow: UnitOfWork,
) -> tuple[list[Notification], int]:
    """Newest first, plus the caller's total unread count."""
    items = await uow.notifications.list_for_user(
        principal.user_id, limit=limit, skip=skip,
    )
    unread = await uow.notifications.count_unread(principal.user_id)
    return items, unread


async def unread_count(principal: Principal, uow: UnitOfWork) -> int:
    return await uow.notifications.count_unread(principal.user_id)


async def mark_read(
    notification_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> None:
    found = await uow.notifications_w.mark_read(notification_id, principal.user_id)
    if not found:
        raise NotFoundError("Notification not found")
    await uow.commit()


async def mark_all_read(principal: Principal, uow: UnitOfWork) -> int:
    updated = await uow.notifications_w.mark_all_read(principal.user_id)
    await uow.commit()
    return updated
