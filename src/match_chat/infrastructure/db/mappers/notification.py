from __future__ import annotations

from match_chat.domain.entities.notification import Notification
from match_chat.infrastructure.db.models.notification import NotificationModel


def model_to_entity(model: NotificationModel) -> Notification:
    return Notification(
        id=model.id,
        recipient_id=model.recipient_id,
        type=model.type,
        title=model.title,
        body=model.body,
        is_read=model.is_read,
        created_at=model.created_at,
        data=model.data,
    )


def entity_to_model(entity: Notification) -> NotificationModel:
    return NotificationModel(
        id=entity.id,
        recipient_id=entity.recipient_id,
        type=entity.type,
        title=entity.title,
        body=entity.body,
        is_read=entity.is_read,
        created_at=entity.created_at,
        data=entity.data,
    )
