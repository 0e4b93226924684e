from __future__ import annotations

from enum import StrEnum


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    GIF = "gif"
    EMOJI = "emoji"


class NotificationType(StrEnum):
    MESSAGE = "message"
    MATCH = "match"
    LIKE = "like"
    SUPER_LIKE = "super-like"
    PROFILE_VIEW = "profile_view"
    SYSTEM = "system"
