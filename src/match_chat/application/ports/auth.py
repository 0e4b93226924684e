from __future__ import annotations

from typing import Protocol

from match_chat.application.dto.principal import Principal


class TokenVerifier(Protocol):
    """Turns a bearer credential into a Principal or raises."""

    async def verify(self, token: str) -> Principal: ...
