from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Notification:
    id: UUID
    recipient_id: int
    type: str
    title: str
    body: str
    is_read: bool
    created_at: datetime
    data: dict[str, Any] | None = None
