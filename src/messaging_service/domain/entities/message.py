from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: str
    receiver_id: str
    content: str
    message_type: str
    attachment_url: str | None
    attachment_type: str | None
    file_name: str | None
    reply_to_id: UUID | None
    is_delivered: bool
    delivered_at: datetime | None
    is_read: bool
    read_at: datetime | None
    is_deleted: bool
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def has_attachment(self) -> bool:
        return bool(self.attachment_url)
