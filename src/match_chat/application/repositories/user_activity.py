from __future__ import annotations

from datetime import datetime
from typing import Protocol


class UserActivityWriter(Protocol):
    async def set_online(self, user_id: int, is_online: bool, ts: datetime) -> None: ...
