from __future__ import annotations

from match_chat.domain.entities.match import Match
from match_chat.infrastructure.db.models.match import MatchModel


def model_to_entity(model: MatchModel) -> Match:
    return Match(
        id=model.id,
        user1_id=model.user1_id,
        user2_id=model.user2_id,
        is_active=model.is_active,
        matched_at=model.matched_at,
        last_message_at=model.last_message_at,
    )


def entity_to_model(entity: Match) -> MatchModel:
    return MatchModel(
        id=entity.id,
        user1_id=entity.user1_id,
        user2_id=entity.user2_id,
        is_active=entity.is_active,
        matched_at=entity.matched_at,
        last_message_at=entity.last_message_at,
    )
