from __future__ import annotations

from typing import Any

import jwt

from match_chat.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from decoded JWT claims.

    Accepts the standard ``sub`` claim and the legacy ``userId`` claim issued
    by the platform's auth service.
    """
    raw_id = payload.get("sub", payload.get("userId"))
    if raw_id is None:
        raise jwt.InvalidTokenError("Token carries no subject")
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError(f"Invalid subject: {raw_id!r}") from exc
    return Principal(user_id=user_id, roles=list(payload.get("roles", [])))
