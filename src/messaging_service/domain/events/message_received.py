from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MessageReceived:
    message_id: UUID
    conversation_id: UUID
    sender_id: str
    receiver_id: str
    content: str
    message_type: str

    event_type = "message_received"
