from __future__ import annotations

import uuid

import pytest

from match_chat.infrastructure.bus.redis_streams import RedisStreamConsumer
from match_chat.workers.match_events_consumer import MatchEventHandler
from tests.conftest import ALICE, BOB, FakeUoW, fake_uow_factory


class FakeRedis:
    def __init__(self) -> None:
        self.acked: list[str] = []

    async def xack(self, stream: str, group: str, entry_id: str) -> int:
        self.acked.append(entry_id)
        return 1


class Pushes:
    def __init__(self) -> None:
        self.calls: list[tuple[int, str, dict]] = []

    async def __call__(self, user_id: int, event_type: str, data: dict) -> int:
        self.calls.append((user_id, event_type, data))
        return 1


@pytest.fixture
def handler_env():
    uow = FakeUoW()
    pushes = Pushes()
    return MatchEventHandler(fake_uow_factory(uow), pushes), uow, pushes


@pytest.mark.asyncio
async def test_match_created_notifies_and_pushes(handler_env):
    handler, uow, pushes = handler_env
    match_id = uuid.uuid4()

    await handler("match.created", {
        "match_id": str(match_id), "user1_id": str(ALICE), "user2_id": str(BOB),
    })

    assert {n.recipient_id for n in uow.notifications._items} == {ALICE, BOB}
    assert [(uid, ev) for uid, ev, _ in pushes.calls] == [
        (ALICE, "matchNotification"), (BOB, "matchNotification"),
    ]
    assert pushes.calls[0][2] == {"type": "match", "matchId": str(match_id)}


@pytest.mark.asyncio
async def test_super_like(handler_env):
    handler, uow, pushes = handler_env

    await handler("like.created", {"liker_id": "1", "liked_id": str(BOB), "super": "true"})

    [n] = uow.notifications._items
    assert n.type == "super-like"
    assert n.recipient_id == BOB
    assert pushes.calls == []


@pytest.mark.asyncio
async def test_unknown_event_ignored(handler_env):
    handler, uow, _ = handler_env

    await handler("profile.updated", {"user_id": "1"})

    assert uow.notifications._items == []


@pytest.mark.asyncio
async def test_consumer_acks_handled_and_malformed_entries(handler_env):
    handler, uow, _ = handler_env
    redis = FakeRedis()
    consumer = RedisStreamConsumer(redis, "matches.events", "match-chat", "c1", handler)

    ok = await consumer.handle_entry("1-0", {
        "event_type": "like.created", "liker_id": "1", "liked_id": "2",
    })
    malformed = await consumer.handle_entry("2-0", {"event_type": "match.created"})

    assert ok is True
    assert malformed is True
    assert redis.acked == ["1-0", "2-0"]
    assert len(uow.notifications._items) == 1


@pytest.mark.asyncio
async def test_consumer_leaves_failed_entry_pending():
    uow = FakeUoW()
    uow.notifications_w.fail = True
    redis = FakeRedis()
    consumer = RedisStreamConsumer(
        redis, "matches.events", "match-chat", "c1",
        MatchEventHandler(fake_uow_factory(uow)),
    )

    acked = await consumer.handle_entry("3-0", {
        "event_type": "like.created", "liker_id": "1", "liked_id": "2",
    })

    assert acked is False
    assert redis.acked == []
