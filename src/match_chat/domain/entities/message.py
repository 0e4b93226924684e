from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    match_id: UUID
    sender_id: int
    receiver_id: int
    type: str
    content: str
    is_read: bool
    created_at: datetime
    read_at: datetime | None = None
    # Server-assigned, strictly increasing; 0 until persisted.
    seq: int = 0
