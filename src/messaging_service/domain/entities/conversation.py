from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

ATTACHMENT_PLACEHOLDER = "[Attachment]"


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    type: str
    title: str | None
    description: str | None
    image_url: str | None
    is_active: bool
    direct_key: str | None
    last_message_id: UUID | None
    last_message_content: str | None
    last_message_at: datetime | None
    last_message_sender: str | None
    created_at: datetime
    updated_at: datetime


def last_message_preview(content: str, has_attachment: bool) -> str:
    """Text cached on the conversation row for its newest message."""
    if content:
        return content
    return ATTACHMENT_PLACEHOLDER if has_attachment else ""
