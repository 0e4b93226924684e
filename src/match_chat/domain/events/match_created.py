from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MatchCreated:
    match_id: UUID
    user1_id: int
    user2_id: int
