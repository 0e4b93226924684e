from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from match_chat.api.deps import CurrentPrincipal, UoWDep
from match_chat.api.v1.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from match_chat.services import notification_service

router = APIRouter(prefix="/api/v1/users/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
) -> NotificationListResponse:
    items, unread = await notification_service.list_notifications(
        principal, limit, skip, uow,
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n, from_attributes=True) for n in items],
        unread_count=unread,
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(principal: CurrentPrincipal, uow: UoWDep) -> UnreadCountResponse:
    count = await notification_service.unread_count(principal, uow)
    return UnreadCountResponse(unread_count=count)


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(principal: CurrentPrincipal, uow: UoWDep) -> MarkAllReadResponse:
    updated = await notification_service.mark_all_read(principal, uow)
    return MarkAllReadResponse(updated=updated)


@router.put("/{notification_id}/read", status_code=204)
async def mark_read(
    notification_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await notification_service.mark_read(notification_id, principal, uow)
