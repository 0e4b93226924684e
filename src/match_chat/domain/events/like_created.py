from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LikeCreated:
    liker_id: int
    liked_id: int
    is_super: bool = False
