from __future__ import annotations

import uuid

import pytest

from match_chat.application.exceptions import UnauthorizedError
from match_chat.infrastructure.ws.channels import ChannelRouter
from match_chat.infrastructure.ws.connection import Connection
from tests.conftest import ALICE, BOB, FakeSocket, FakeUoW, fake_uow_factory, make_match


@pytest.fixture
def setup():
    uow = FakeUoW()
    match = uow.matches.add(make_match())
    return ChannelRouter(fake_uow_factory(uow)), match


@pytest.mark.asyncio
async def test_join_adds_member(setup, alice):
    router, match = setup
    conn = Connection(FakeSocket(), alice)

    channel = await router.join(conn, match.id)

    assert channel.participants == frozenset({ALICE, BOB})
    assert router.members(match.id) == [conn]
    assert match.id in conn.channels


@pytest.mark.asyncio
async def test_join_is_idempotent(setup, alice):
    router, match = setup
    conn = Connection(FakeSocket(), alice)

    await router.join(conn, match.id)
    await router.join(conn, match.id)

    assert router.members(match.id) == [conn]


@pytest.mark.asyncio
async def test_non_participant_rejected(setup, alice, mallory):
    router, match = setup
    intruder = Connection(FakeSocket(), mallory)

    with pytest.raises(UnauthorizedError):
        await router.join(intruder, match.id)
    assert router.get(match.id) is None

    # Also rejected once the channel exists.
    await router.join(Connection(FakeSocket(), alice), match.id)
    with pytest.raises(UnauthorizedError):
        await router.join(intruder, match.id)
    assert intruder not in router.members(match.id)
    assert intruder.channels == set()


@pytest.mark.asyncio
async def test_join_unknown_match(setup, alice):
    router, _ = setup

    with pytest.raises(UnauthorizedError):
        await router.join(Connection(FakeSocket(), alice), uuid.uuid4())


@pytest.mark.asyncio
async def test_leave_drops_empty_channel(setup, alice, bob):
    router, match = setup
    a = Connection(FakeSocket(), alice)
    b = Connection(FakeSocket(), bob)
    await router.join(a, match.id)
    await router.join(b, match.id)

    assert router.leave(a, match.id) is True
    assert router.members(match.id) == [b]
    assert router.leave(b, match.id) is True
    assert router.get(match.id) is None
    assert router.participants(match.id) == frozenset()


@pytest.mark.asyncio
async def test_leave_not_joined_is_noop(setup, alice):
    router, match = setup

    assert router.leave(Connection(FakeSocket(), alice), match.id) is False


@pytest.mark.asyncio
async def test_leave_all(alice):
    uow = FakeUoW()
    m1 = uow.matches.add(make_match())
    m2 = uow.matches.add(make_match(user2_id=77))
    router = ChannelRouter(fake_uow_factory(uow))
    conn = Connection(FakeSocket(), alice)
    await router.join(conn, m1.id)
    await router.join(conn, m2.id)

    left = router.leave_all(conn)

    assert set(left) == {m1.id, m2.id}
    assert conn.channels == set()
    assert len(router) == 0
