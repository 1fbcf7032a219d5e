from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from messaging_service.api.v1.schemas.common import CamelModel, UserBrief, UserPublic
from messaging_service.application.dto.conversation import (
    ConversationSummaryView,
    ConversationView,
)
from messaging_service.application.dto.message import MessageView
from messaging_service.domain.entities.conversation import last_message_preview
from messaging_service.domain.value_objects.enums import ConversationType


class CreateConversationRequest(CamelModel):
    participant_id: str | None = None
    type: ConversationType = ConversationType.DIRECT
    title: str | None = Field(None, max_length=191)
    description: str | None = None
    participant_ids: list[str] = Field(default_factory=list)


class ConversationActionRequest(CamelModel):
    action: str


class ConversationResponse(CamelModel):
    id: UUID
    type: str
    title: str | None
    description: str | None
    image_url: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    participants: list[UserPublic]
    last_message_id: UUID | None
    last_message_content: str | None
    last_message_at: datetime | None
    last_message_sender: str | None

    @classmethod
    def from_view(cls, view: ConversationView) -> ConversationResponse:
        c = view.conversation
        return cls(
            id=c.id,
            type=c.type,
            title=c.title,
            description=c.description,
            image_url=c.image_url,
            is_active=c.is_active,
            created_at=c.created_at,
            updated_at=c.updated_at,
            participants=[UserPublic.from_entity(u) for u in view.participants],
            last_message_id=c.last_message_id,
            last_message_content=c.last_message_content,
            last_message_at=c.last_message_at,
            last_message_sender=c.last_message_sender,
        )


class LastMessageResponse(CamelModel):
    id: UUID
    content: str
    message_type: str
    created_at: datetime
    sender_id: str
    sender: UserBrief | None
    attachment_url: str | None
    file_name: str | None

    @classmethod
    def from_view(cls, view: MessageView) -> LastMessageResponse:
        m = view.message
        return cls(
            id=m.id,
            content=m.content,
            message_type=m.message_type,
            created_at=m.created_at,
            sender_id=m.sender_id,
            sender=UserBrief.from_entity(view.sender),
            attachment_url=m.attachment_url,
            file_name=m.file_name,
        )


class ConversationSummaryResponse(ConversationResponse):
    last_message: LastMessageResponse | None
    unread_count: int

    @classmethod
    def from_summary(cls, view: ConversationSummaryView) -> ConversationSummaryResponse:
        c = view.conversation
        last = view.last_message.message if view.last_message else None
        return cls(
            id=c.id,
            type=c.type,
            title=c.title,
            description=c.description,
            image_url=c.image_url,
            is_active=c.is_active,
            created_at=c.created_at,
            updated_at=c.updated_at,
            participants=[UserPublic.from_entity(u) for u in view.participants],
            last_message_id=last.id if last else None,
            last_message_content=(
                last_message_preview(last.content, last.has_attachment) if last else None
            ),
            last_message_at=view.last_message_at,
            last_message_sender=last.sender_id if last else None,
            last_message=LastMessageResponse.from_view(view.last_message) if view.last_message else None,
            unread_count=view.unread_count,
        )


class ConversationListEnvelope(CamelModel):
    success: bool = True
    conversations: list[ConversationSummaryResponse]


class ConversationEnvelope(CamelModel):
    success: bool = True
    conversation: ConversationResponse
