from __future__ import annotations

from datetime import datetime, timezone

from match_chat.client.models import ChatMessage
from match_chat.client.timeline import MessageTimeline
from match_chat.infrastructure.ws.protocol import message_payload
from tests.conftest import ALICE, BOB, make_message


def _client_msg(seq: int, **kw) -> ChatMessage:
    return ChatMessage.model_validate(message_payload(make_message(seq=seq, **kw)))


def test_duplicate_add_ignored():
    timeline = MessageTimeline()
    msg = _client_msg(1)

    assert timeline.add(msg) is True
    assert timeline.add(msg.model_copy()) is False
    assert len(timeline) == 1


def test_out_of_order_arrivals_sorted_by_seq():
    timeline = MessageTimeline()
    for seq in (3, 1, 2):
        timeline.add(_client_msg(seq))

    assert [m.seq for m in timeline] == [1, 2, 3]
    assert timeline.last.seq == 3
    assert timeline.oldest_seq == 1


def test_reset_merges_snapshot_with_live():
    timeline = MessageTimeline()
    live_old, live_new = _client_msg(1), _client_msg(3)
    timeline.add(live_old)
    timeline.add(live_new)
    snapshot_copy = live_old.model_copy(update={"is_read": True})

    timeline.reset([snapshot_copy, _client_msg(2)])

    assert [m.seq for m in timeline] == [1, 2, 3]
    assert next(iter(timeline)).is_read is True
    assert live_new.id in timeline


def test_mark_read_by_receiver():
    timeline = MessageTimeline()
    to_bob = _client_msg(1, sender_id=ALICE, receiver_id=BOB)
    to_alice = _client_msg(2, sender_id=BOB, receiver_id=ALICE)
    timeline.add(to_bob)
    timeline.add(to_alice)
    read_at = datetime(2026, 5, 1, tzinfo=timezone.utc)

    assert timeline.mark_read_by(BOB, read_at) == 1

    first, second = list(timeline)
    assert first.is_read and first.read_at == read_at
    assert not second.is_read
