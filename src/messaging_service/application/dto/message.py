from __future__ import annotations

import math
from dataclasses import dataclass
from uuid import UUID

from messaging_service.domain.entities.message import Message
from messaging_service.domain.entities.user import User
from messaging_service.domain.value_objects.enums import MessageType


@dataclass(frozen=True, slots=True)
class PostMessageDTO:
    content: str
    message_type: MessageType = MessageType.TEXT
    attachment_url: str | None = None
    attachment_type: str | None = None
    file_name: str | None = None
    reply_to_id: UUID | None = None


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    detail: str


def validate_post_message(
    content: str | None,
    message_type: MessageType = MessageType.TEXT,
    attachment_url: str | None = None,
    attachment_type: str | None = None,
    file_name: str | None = None,
    reply_to_id: UUID | None = None,
) -> PostMessageDTO | ValidationFailure:
    """Normalize a post-message request. Never raises for bad input."""
    text = (content or "").strip()
    url = (attachment_url or "").strip() or None
    if not text and url is None:
        return ValidationFailure("Message content or attachment required")
    return PostMessageDTO(
        content=text,
        message_type=message_type,
        attachment_url=url,
        attachment_type=attachment_type,
        file_name=file_name,
        reply_to_id=reply_to_id,
    )


@dataclass(frozen=True, slots=True)
class ReplyPreview:
    message: Message
    sender: User | None


@dataclass(frozen=True, slots=True)
class MessageView:
    """Message with sender/receiver profiles and a one-level reply preview."""

    message: Message
    sender: User | None
    receiver: User | None
    reply_to: ReplyPreview | None = None


@dataclass(frozen=True, slots=True)
class PageDTO:
    page: int
    limit: int
    total_count: int
    returned: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def has_more(self) -> bool:
        return self.offset + self.returned < self.total_count

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.limit else 0


@dataclass(frozen=True, slots=True)
class MessagePage:
    messages: list[MessageView]
    page: PageDTO
