from __future__ import annotations

import pytest

from match_chat.application.exceptions import UnauthorizedError
from match_chat.application.ports.clock import ManualClock
from match_chat.infrastructure.ws.hub import RealtimeHub
from tests.conftest import ALICE, BOB, FakeSocket, FakeUoW, fake_uow_factory, make_match


@pytest.fixture
def env():
    uow = FakeUoW()
    match = uow.matches.add(make_match())
    return RealtimeHub(fake_uow_factory(uow)), uow, match


async def _joined(hub, principal, match_id):
    sock = FakeSocket()
    conn = await hub.connect(sock, principal)
    await hub.router.join(conn, match_id)
    return conn, sock


@pytest.mark.asyncio
async def test_typing_goes_to_others_only(env, alice, bob):
    hub, _, match = env
    a_conn, a_sock = await _joined(hub, alice, match.id)
    _, b_sock = await _joined(hub, bob, match.id)

    delivered = await hub.signaler.start_typing(a_conn, match.id)

    assert delivered == 1
    assert b_sock.events("user_typing") == [
        {"userId": ALICE, "matchId": str(match.id), "isTyping": True}
    ]
    assert a_sock.events("user_typing") == []


@pytest.mark.asyncio
async def test_typing_alone_is_dropped(env, alice):
    hub, _, match = env
    a_conn, _ = await _joined(hub, alice, match.id)

    assert await hub.signaler.start_typing(a_conn, match.id) == 0


@pytest.mark.asyncio
async def test_typing_from_non_member_is_dropped_silently(env, bob, mallory):
    hub, _, match = env
    _, b_sock = await _joined(hub, bob, match.id)
    intruder = await hub.connect(FakeSocket(), mallory)

    assert await hub.signaler.stop_typing(intruder, match.id) == 0
    assert b_sock.events("user_typing") == []


@pytest.mark.asyncio
async def test_typing_then_send_arrive_in_order(env, alice, bob):
    hub, _, match = env
    a_conn, _ = await _joined(hub, alice, match.id)
    _, b_sock = await _joined(hub, bob, match.id)

    await hub.signaler.start_typing(a_conn, match.id)
    await hub.relay.send_message(a_conn, match.id, "hi", "text")

    relevant = [t for t in b_sock.types() if t in ("user_typing", "new_message")]
    assert relevant == ["user_typing", "new_message"]


@pytest.mark.asyncio
async def test_mark_read_persists_and_broadcasts(env, alice, bob):
    hub, uow, match = env
    a_conn, a_sock = await _joined(hub, alice, match.id)
    b_conn, b_sock = await _joined(hub, bob, match.id)
    await hub.relay.send_message(a_conn, match.id, "hi", "text")

    updated, read_at = await hub.signaler.mark_read(b_conn.principal, match.id, exclude=b_conn)

    assert updated == 1
    assert await uow.messages.count_unread(match.id, BOB) == 0
    assert a_sock.events("messages_read") == [
        {"matchId": str(match.id), "readerId": BOB, "readAt": read_at.isoformat()}
    ]
    assert b_sock.events("messages_read") == []


@pytest.mark.asyncio
async def test_mark_read_by_non_participant(env, mallory):
    hub, _, match = env

    with pytest.raises(UnauthorizedError):
        await hub.signaler.mark_read(mallory, match.id)


@pytest.mark.asyncio
async def test_read_receipt_uses_hub_clock(alice, bob):
    uow = FakeUoW()
    match = uow.matches.add(make_match())
    clock = ManualClock()
    hub = RealtimeHub(fake_uow_factory(uow), clock=clock)
    a_conn, a_sock = await _joined(hub, alice, match.id)
    await hub.relay.send_message(a_conn, match.id, "hi", "text")
    clock.advance(90)

    await hub.signaler.mark_read(bob, match.id)

    [receipt] = a_sock.events("messages_read")
    assert receipt["readAt"] == "2026-01-01T00:01:30+00:00"
    assert uow.messages._messages[0].created_at.isoformat() == "2026-01-01T00:00:00+00:00"
