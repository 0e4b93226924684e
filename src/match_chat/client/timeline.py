from __future__ import annotations

import bisect
from datetime import datetime
from typing import Iterable, Iterator
from uuid import UUID

from match_chat.client.models import ChatMessage


def _order_key(msg: ChatMessage) -> tuple[int, datetime]:
    return msg.seq, msg.created_at


class MessageTimeline:
    """Messages of one match, ordered by server sequence, each id at most once.

    The same message can arrive twice (REST snapshot and live event, or a
    redelivery after reconnect); every insertion goes through the id index.
    """

    def __init__(self) -> None:
        self._by_id: dict[UUID, ChatMessage] = {}
        self._ordered: list[ChatMessage] = []

    def add(self, msg: ChatMessage) -> bool:
        """Insert in order. Returns False for an already known id."""
        if msg.id in self._by_id:
            return False
        self._by_id[msg.id] = msg
        bisect.insort(self._ordered, msg, key=_order_key)
        return True

    def reset(self, history: Iterable[ChatMessage]) -> None:
        """Replace with a fresh snapshot, keeping live messages the snapshot does not contain.

        For ids present in both, the snapshot copy wins (it carries newer read state).
        """
        merged = {m.id: m for m in self._ordered}
        merged.update((m.id, m) for m in history)
        self._by_id = merged
        self._ordered = sorted(merged.values(), key=_order_key)

    def mark_read_by(self, reader_id: int, read_at: datetime) -> int:
        """Apply a read receipt to every unread message the reader received."""
        changed = 0
        for i, msg in enumerate(self._ordered):
            if msg.receiver_id == reader_id and not msg.is_read:
                updated = msg.model_copy(update={"is_read": True, "read_at": read_at})
                self._ordered[i] = updated
                self._by_id[msg.id] = updated
                changed += 1
        return changed

    @property
    def last(self) -> ChatMessage | None:
        return self._ordered[-1] if self._ordered else None

    @property
    def oldest_seq(self) -> int | None:
        return self._ordered[0].seq if self._ordered else None

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._by_id

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(list(self._ordered))

    def __len__(self) -> int:
        return len(self._ordered)
