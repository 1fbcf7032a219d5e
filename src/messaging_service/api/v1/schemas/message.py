from __future__ import annotations

from datetime import datetime
from uuid import UUID

from messaging_service.api.v1.schemas.common import CamelModel, UserBrief, UserName
from messaging_service.application.dto.message import MessagePage, MessageView, ReplyPreview
from messaging_service.domain.value_objects.enums import MessageType


class SendMessageRequest(CamelModel):
    content: str | None = None
    message_type: MessageType = MessageType.TEXT
    attachment_url: str | None = None
    attachment_type: str | None = None
    file_name: str | None = None
    reply_to_id: UUID | None = None


class SendDirectMessageRequest(SendMessageRequest):
    receiver_id: str


class MessageActionRequest(CamelModel):
    action: str


class ReplyPreviewResponse(CamelModel):
    id: UUID
    content: str
    message_type: str
    sender_id: str
    is_deleted: bool
    created_at: datetime
    sender: UserName | None

    @classmethod
    def from_view(cls, view: ReplyPreview) -> ReplyPreviewResponse:
        m = view.message
        return cls(
            id=m.id,
            content=m.content,
            message_type=m.message_type,
            sender_id=m.sender_id,
            is_deleted=m.is_deleted,
            created_at=m.created_at,
            sender=UserName.from_entity(view.sender),
        )


class MessageResponse(CamelModel):
    id: UUID
    content: str
    message_type: str
    attachment_url: str | None
    attachment_type: str | None
    file_name: str | None
    sender_id: str
    receiver_id: str
    conversation_id: UUID
    reply_to_id: UUID | None
    is_delivered: bool
    delivered_at: datetime | None
    is_read: bool
    read_at: datetime | None
    is_deleted: bool
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime
    sender: UserBrief | None
    receiver: UserBrief | None
    reply_to: ReplyPreviewResponse | None = None

    @classmethod
    def from_view(cls, view: MessageView) -> MessageResponse:
        m = view.message
        return cls(
            id=m.id,
            content=m.content,
            message_type=m.message_type,
            attachment_url=m.attachment_url,
            attachment_type=m.attachment_type,
            file_name=m.file_name,
            sender_id=m.sender_id,
            receiver_id=m.receiver_id,
            conversation_id=m.conversation_id,
            reply_to_id=m.reply_to_id,
            is_delivered=m.is_delivered,
            delivered_at=m.delivered_at,
            is_read=m.is_read,
            read_at=m.read_at,
            is_deleted=m.is_deleted,
            deleted_at=m.deleted_at,
            created_at=m.created_at,
            updated_at=m.updated_at,
            sender=UserBrief.from_entity(view.sender),
            receiver=UserBrief.from_entity(view.receiver),
            reply_to=ReplyPreviewResponse.from_view(view.reply_to) if view.reply_to else None,
        )


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total_count: int
    has_more: bool
    total_pages: int


class MessageEnvelope(CamelModel):
    success: bool = True
    message: MessageResponse


class MessageListEnvelope(CamelModel):
    success: bool = True
    messages: list[MessageResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, result: MessagePage) -> MessageListEnvelope:
        page = result.page
        return cls(
            messages=[MessageResponse.from_view(v) for v in result.messages],
            pagination=PaginationResponse(
                page=page.page,
                limit=page.limit,
                total_count=page.total_count,
                has_more=page.has_more,
                total_pages=page.total_pages,
            ),
        )


class MessageResultEnvelope(CamelModel):
    success: bool = True
    message: str
    data: MessageResponse
