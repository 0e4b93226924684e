from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from match_chat.domain.value_objects.enums import NotificationType


@dataclass(frozen=True, slots=True)
class CreateNotificationDTO:
    recipient_id: int
    type: NotificationType
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
