from __future__ import annotations

from enum import StrEnum


class ConversationType(StrEnum):
    DIRECT = "direct"
    GROUP = "group"


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"


class MessageAction(StrEnum):
    MARK_READ = "mark_read"
    DELETE = "delete"


class ConversationAction(StrEnum):
    MARK_ALL_READ = "mark_all_read"
