from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ConversationUpdated:
    conversation_id: UUID
    participant_ids: list[str]
    last_message_id: UUID | None
    last_message_content: str | None
    last_message_at: datetime | None
    last_message_sender: str | None

    event_type = "conversation_updated"
