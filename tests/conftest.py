"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import json
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator
from uuid import UUID

import pytest

from match_chat.application.dto.principal import Principal
from match_chat.domain.entities.match import Match
from match_chat.domain.entities.message import Message
from match_chat.domain.entities.notification import Notification
from match_chat.domain.value_objects.enums import MessageType

ALICE = 42
BOB = 43
MALLORY = 99


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id=ALICE, roles=[])


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id=BOB, roles=[])


@pytest.fixture
def mallory() -> Principal:
    return Principal(user_id=MALLORY, roles=[])


def make_match(
    *,
    match_id: UUID | None = None,
    user1_id: int = ALICE,
    user2_id: int = BOB,
    is_active: bool = True,
) -> Match:
    return Match(
        id=match_id or uuid.uuid4(),
        user1_id=user1_id,
        user2_id=user2_id,
        is_active=is_active,
        matched_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


def make_message(
    *,
    match_id: UUID | None = None,
    sender_id: int = ALICE,
    receiver_id: int = BOB,
    content: str = "hello",
    seq: int = 1,
    is_read: bool = False,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        match_id=match_id or uuid.uuid4(),
        sender_id=sender_id,
        receiver_id=receiver_id,
        type=MessageType.TEXT,
        content=content,
        is_read=is_read,
        created_at=datetime.now(timezone.utc),
        seq=seq,
    )


@dataclass
class FakeMatchReader:
    _store: dict[UUID, Match] = field(default_factory=dict)

    def add(self, match: Match) -> Match:
        self._store[match.id] = match
        return match

    async def get_by_id(self, match_id: UUID) -> Match | None:
        return self._store.get(match_id)

    async def list_active_for_user(self, user_id: int) -> list[Match]:
        return [m for m in self._store.values() if m.is_active and m.has_participant(user_id)]


@dataclass
class FakeMatchWriter:
    _reader: FakeMatchReader

    async def create(self, match: Match) -> Match:
        return self._reader.add(match)

    async def touch_last_message_at(self, match_id: UUID, ts: datetime) -> None:
        match = self._reader._store.get(match_id)
        if match is not None:
            self._reader._store[match_id] = dataclasses.replace(match, last_message_at=ts)


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def list_messages(
        self,
        match_id: UUID,
        *,
        before_seq: int | None = None,
        limit: int = 50,
    ) -> list[Message]:
        msgs = [
            m for m in self._messages
            if m.match_id == match_id and (before_seq is None or m.seq < before_seq)
        ]
        msgs.sort(key=lambda m: m.seq)
        return msgs[-limit:]

    async def get_last(self, match_id: UUID) -> Message | None:
        msgs = [m for m in self._messages if m.match_id == match_id]
        return max(msgs, key=lambda m: m.seq) if msgs else None

    async def count_unread(self, match_id: UUID, receiver_id: int) -> int:
        return sum(
            1 for m in self._messages
            if m.match_id == match_id and m.receiver_id == receiver_id and not m.is_read
        )


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    _seq: int = 0

    async def create(self, message: Message) -> Message:
        self._seq += 1
        stored = dataclasses.replace(message, seq=self._seq)
        self._reader._messages.append(stored)
        return stored

    async def mark_read_for_receiver(
        self, match_id: UUID, receiver_id: int, read_at: datetime,
    ) -> int:
        updated = 0
        for i, m in enumerate(self._reader._messages):
            if m.match_id == match_id and m.receiver_id == receiver_id and not m.is_read:
                self._reader._messages[i] = dataclasses.replace(m, is_read=True, read_at=read_at)
                updated += 1
        return updated


@dataclass
class FakeNotificationReader:
    _items: list[Notification] = field(default_factory=list)

    async def list_for_user(self, user_id: int, *, limit: int = 20, skip: int = 0) -> list[Notification]:
        mine = [n for n in self._items if n.recipient_id == user_id]
        mine.sort(key=lambda n: n.created_at, reverse=True)
        return mine[skip:skip + limit]

    async def count_unread(self, user_id: int) -> int:
        return sum(1 for n in self._items if n.recipient_id == user_id and not n.is_read)


@dataclass
class FakeNotificationWriter:
    _reader: FakeNotificationReader
    fail: bool = False

    async def create(self, notification: Notification) -> Notification:
        if self.fail:
            raise RuntimeError("notification store down")
        self._reader._items.append(notification)
        return notification

    async def mark_read(self, notification_id: UUID, user_id: int) -> bool:
        for i, n in enumerate(self._reader._items):
            if n.id == notification_id and n.recipient_id == user_id:
                self._reader._items[i] = dataclasses.replace(n, is_read=True)
                return True
        return False

    async def mark_all_read(self, user_id: int) -> int:
        updated = 0
        for i, n in enumerate(self._reader._items):
            if n.recipient_id == user_id and not n.is_read:
                self._reader._items[i] = dataclasses.replace(n, is_read=True)
                updated += 1
        return updated


@dataclass
class FakeActivityWriter:
    calls: list[tuple[int, bool]] = field(default_factory=list)

    async def set_online(self, user_id: int, is_online: bool, ts: datetime) -> None:
        self.calls.append((user_id, is_online))


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    matches: FakeMatchReader = field(default_factory=FakeMatchReader)
    matches_w: FakeMatchWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    notifications: FakeNotificationReader = field(default_factory=FakeNotificationReader)
    notifications_w: FakeNotificationWriter | None = None
    activity_w: FakeActivityWriter = field(default_factory=FakeActivityWriter)
    _committed: bool = False
    commits: int = 0

    def __post_init__(self) -> None:
        if self.matches_w is None:
            self.matches_w = FakeMatchWriter(self.matches)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)
        if self.notifications_w is None:
            self.notifications_w = FakeNotificationWriter(self.notifications)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True
        self.commits += 1

    async def rollback(self) -> None:
        pass


def fake_uow_factory(uow: FakeUoW):
    """UoW factory that always hands out the same in-memory store."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUoW]:
        yield uow

    return _factory


class FakeSocket:
    """Collects frames the server would write to a client."""

    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(data))

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        if event_type is None:
            return self.sent
        return [e["data"] for e in self.sent if e["type"] == event_type]

    def types(self) -> list[str]:
        return [e["type"] for e in self.sent]


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()
