from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MessageRead:
    message_id: UUID
    conversation_id: UUID
    sender_id: str
    reader_id: str
    read_at: datetime

    event_type = "message_read"


@dataclass(frozen=True, slots=True)
class ConversationRead:
    conversation_id: UUID
    reader_id: str
    updated_count: int
    read_at: datetime

    event_type = "conversation_read"
