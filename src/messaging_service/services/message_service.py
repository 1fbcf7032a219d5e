from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_service.application.dto.conversation import CreateConversationDTO
from messaging_service.application.dto.message import (
    MessagePage,
    MessageView,
    PageDTO,
    PostMessageDTO,
    ReplyPreview,
)
from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import NotFoundError, ValidationError
from messaging_service.application.policies.permissions import assert_conversation_access
from messaging_service.application.ports.bus import EventPublisher
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import last_message_preview
from messaging_service.domain.entities.message import Message
from messaging_service.domain.events.conversation_updated import ConversationUpdated
from messaging_service.domain.events.message_received import MessageReceived
from messaging_service.domain.events.read_receipts import MessageRead
from messaging_service.domain.value_objects.enums import MessageAction
from messaging_service.services import conversation_service
from messaging_service.services.events import publish_event

logger = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 100
MESSAGE_NOT_FOUND = "Message not found"


async def list_messages(
    conversation_id: uuid.UUID,
    principal: Principal,
    page: int,
    limit: int,
    uow: UnitOfWork,
    *,
    max_limit: int = MAX_PAGE_LIMIT,
) -> MessagePage:
    """Return one page of non-deleted messages, oldest first."""
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive integers")
    limit = min(limit, max_limit)

    await assert_conversation_access(principal, conversation_id, uow.conversations)

    offset = (page - 1) * limit
    messages = await uow.messages.list_messages(conversation_id, offset=offset, limit=limit)
    total = await uow.messages.count_messages(conversation_id)

    return MessagePage(
        messages=await build_message_views(messages, uow),
        page=PageDTO(page=page, limit=limit, total_count=total, returned=len(messages)),
    )


async def post_message(
    conversation_id: uuid.UUID,
    principal: Principal,
    data: PostMessageDTO,
    uow: UnitOfWork,
    publisher: EventPublisher | None = None,
) -> MessageView:
    """Append a message and refresh the conversation's last-message summary.

    Both writes share one commit. Not idempotent: every call creates a new
    message.
    """
    await assert_conversation_access(principal, conversation_id, uow.conversations)

    members = await uow.participants.list_participants(conversation_id)
    receiver = next((p for p in members if p.user_id != principal.user_id), None)
    if receiver is None:
        raise ValidationError("Receiver not found in conversation")

    if data.reply_to_id is not None:
        target = await uow.messages.get_by_id(data.reply_to_id)
        if target is None or target.conversation_id != conversation_id:
            raise ValidationError("Reply target not found in conversation")

    now = datetime.now(timezone.utc)
    msg = Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=principal.user_id,
        receiver_id=receiver.user_id,
        content=data.content,
        message_type=data.message_type.value,
        attachment_url=data.attachment_url,
        attachment_type=data.attachment_type,
        file_name=data.file_name,
        reply_to_id=data.reply_to_id,
        is_delivered=True,
        delivered_at=now,
        is_read=False,
        read_at=None,
        is_deleted=False,
        deleted_at=None,
        created_at=now,
        updated_at=now,
    )
    msg = await uow.messages_w.create(msg)
    await uow.conversations_w.set_last_message(conversation_id, msg)
    await uow.commit()

    logger.info(
        "Message %s posted to conversation %s (%d chars)",
        msg.id,
        conversation_id,
        len(msg.content),
    )

    await publish_event(
        publisher,
        MessageReceived(
            message_id=msg.id,
            conversation_id=conversation_id,
            sender_id=msg.sender_id,
            receiver_id=msg.receiver_id,
            content=msg.content,
            message_type=msg.message_type,
        ),
    )
    await publish_event(
        publisher,
        ConversationUpdated(
            conversation_id=conversation_id,
            participant_ids=[p.user_id for p in members],
            last_message_id=msg.id,
            last_message_content=last_message_preview(msg.content, msg.has_attachment),
            last_message_at=msg.created_at,
            last_message_sender=msg.sender_id,
        ),
    )

    views = await build_message_views([msg], uow)
    return views[0]


async def send_to_user(
    principal: Principal,
    receiver_id: str,
    data: PostMessageDTO,
    uow: UnitOfWork,
    publisher: EventPublisher | None = None,
) -> MessageView:
    """Send a message to a user, opening the direct conversation on first contact.

    The conversation is committed before the message, so a failed post still
    leaves the (empty) conversation in place.
    """
    receiver = await uow.users.get_by_id(receiver_id)
    if receiver is None or not receiver.is_active:
        raise NotFoundError("Receiver not found")

    view, created = await conversation_service.create_conversation(
        principal, CreateConversationDTO(participant_id=receiver_id), uow,
    )
    if created:
        logger.info("Opened direct conversation %s on first message", view.conversation.id)
    return await post_message(view.conversation.id, principal, data, uow, publisher)


async def update_message(
    message_id: uuid.UUID,
    principal: Principal,
    action: str,
    uow: UnitOfWork,
    publisher: EventPublisher | None = None,
) -> MessageView:
    """Apply a single-message action: mark_read (receiver) or delete (sender)."""
    try:
        parsed = MessageAction(action)
    except ValueError:
        raise ValidationError("Invalid action") from None

    msg = await uow.messages.get_by_id(message_id)
    if msg is None or msg.is_deleted:
        raise NotFoundError(MESSAGE_NOT_FOUND)

    now = datetime.now(timezone.utc)
    if parsed is MessageAction.MARK_READ:
        if msg.receiver_id != principal.user_id:
            raise NotFoundError(MESSAGE_NOT_FOUND)
        if not msg.is_read:
            await uow.messages_w.mark_read(msg.id, now)
            await uow.commit()
            await publish_event(
                publisher,
                MessageRead(
                    message_id=msg.id,
                    conversation_id=msg.conversation_id,
                    sender_id=msg.sender_id,
                    reader_id=principal.user_id,
                    read_at=now,
                ),
            )
    else:
        if msg.sender_id != principal.user_id:
            raise NotFoundError(MESSAGE_NOT_FOUND)
        await uow.messages_w.soft_delete(msg.id, now)
        conversation = await uow.conversations.get_by_id(msg.conversation_id)
        if conversation is not None and conversation.last_message_id == msg.id:
            latest = await uow.messages.latest_for_conversations([msg.conversation_id])
            await uow.conversations_w.set_last_message(
                msg.conversation_id, latest.get(msg.conversation_id),
            )
        await uow.commit()
        logger.info("Message %s soft-deleted by %s", msg.id, principal.user_id)

    updated = await uow.messages.get_by_id(msg.id)
    views = await build_message_views([updated or msg], uow)
    return views[0]


async def build_message_views(
    messages: list[Message],
    uow: UnitOfWork,
) -> list[MessageView]:
    """Attach sender/receiver profiles and a one-level reply preview."""
    reply_ids = {m.reply_to_id for m in messages if m.reply_to_id is not None}
    replies = await uow.messages.get_many(reply_ids) if reply_ids else {}

    user_ids: set[str] = set()
    for m in messages:
        user_ids.add(m.sender_id)
        user_ids.add(m.receiver_id)
    user_ids.update(r.sender_id for r in replies.values())
    users = await uow.users.get_many(user_ids) if user_ids else {}

    views: list[MessageView] = []
    for m in messages:
        reply = replies.get(m.reply_to_id) if m.reply_to_id is not None else None
        views.append(
            MessageView(
                message=m,
                sender=users.get(m.sender_id),
                receiver=users.get(m.receiver_id),
                reply_to=(
                    ReplyPreview(message=reply, sender=users.get(reply.sender_id))
                    if reply is not None
                    else None
                ),
            )
        )
    return views
