from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from messaging_service.application.dto.message import MessageView
from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.entities.user import User
from messaging_service.domain.value_objects.enums import ConversationType


@dataclass(frozen=True, slots=True)
class CreateConversationDTO:
    participant_id: str
    type: ConversationType = ConversationType.DIRECT
    title: str | None = None
    description: str | None = None
    participant_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ConversationView:
    """Conversation enriched with participant profiles."""

    conversation: Conversation
    participants: list[User] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ConversationSummaryView:
    """Row of a user's conversation list.

    The last-message fields come from the newest non-deleted message rather
    than the cached columns on the conversation row.
    """

    conversation: Conversation
    participants: list[User]
    last_message: MessageView | None
    unread_count: int

    @property
    def last_message_at(self) -> datetime:
        if self.last_message is not None:
            return self.last_message.message.created_at
        return self.conversation.created_at
