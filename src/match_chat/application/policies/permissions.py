from __future__ import annotations

from match_chat.application.dto.principal import Principal
from match_chat.application.exceptions import UnauthorizedError, ValidationError
from match_chat.domain.entities.match import Match


def assert_match_access(principal: Principal, match: Match | None) -> Match:
    """Raise unless the match exists and principal is one of its two users.

    A missing match is reported the same way as a foreign one, so a caller
    cannot tell which match ids exist.
    """
    if match is None or not match.has_participant(principal.user_id):
        raise UnauthorizedError("Not a participant of this match")

    return match


def assert_match_active(match: Match) -> None:
    if not match.is_active:
        raise ValidationError("Cannot send message to inactive match")
