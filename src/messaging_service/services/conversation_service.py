from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_service.application.dto.conversation import (
    ConversationSummaryView,
    ConversationView,
    CreateConversationDTO,
)
from messaging_service.application.dto.message import MessageView
from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import NotFoundError, ValidationError
from messaging_service.application.policies.permissions import assert_conversation_access
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.entities.participant import Participant
from messaging_service.domain.value_objects.enums import ConversationType
from messaging_service.domain.value_objects.ids import direct_key

logger = logging.getLogger(__name__)


async def list_conversations(
    principal: Principal,
    uow: UnitOfWork,
) -> list[ConversationSummaryView]:
    """List the caller's active conversations, newest activity first.

    Each row carries the newest non-deleted message and an unread count
    computed from current message state.
    """
    conversations = await uow.conversations.list_for_user(principal.user_id)
    if not conversations:
        return []

    ids = [c.id for c in conversations]
    participants = await uow.participants.list_for_conversations(ids)
    latest = await uow.messages.latest_for_conversations(ids)
    unread = await uow.messages.count_unread_by_conversation(principal.user_id, ids)

    user_ids = {p.user_id for members in participants.values() for p in members}
    user_ids.update(m.sender_id for m in latest.values())
    users = await uow.users.get_many(user_ids)

    views: list[ConversationSummaryView] = []
    for conversation in conversations:
        members = participants.get(conversation.id, [])
        last = latest.get(conversation.id)
        views.append(
            ConversationSummaryView(
                conversation=conversation,
                participants=[users[p.user_id] for p in members if p.user_id in users],
                last_message=(
                    MessageView(
                        message=last,
                        sender=users.get(last.sender_id),
                        receiver=None,
                    )
                    if last is not None
                    else None
                ),
                unread_count=unread.get(conversation.id, 0),
            )
        )

    views.sort(key=lambda v: (v.last_message_at, str(v.conversation.id)), reverse=True)
    return views


async def create_conversation(
    principal: Principal,
    data: CreateConversationDTO,
    uow: UnitOfWork,
) -> tuple[ConversationView, bool]:
    """Create a conversation, or return the existing direct one for the pair.

    Returns (view, created) where created=False means an existing direct
    conversation was returned.
    """
    if not data.participant_id:
        raise ValidationError("Participant ID is required")

    is_direct = data.type == ConversationType.DIRECT
    if is_direct and data.participant_id == principal.user_id:
        raise ValidationError("Cannot start a direct conversation with yourself")

    member_ids = [principal.user_id, data.participant_id]
    if not is_direct:
        member_ids.extend(data.participant_ids)
    member_ids = list(dict.fromkeys(member_ids))

    users = await uow.users.get_many(member_ids)
    for user_id in member_ids[1:]:
        user = users.get(user_id)
        if user is None or not user.is_active:
            raise NotFoundError("Participant not found")

    key = direct_key(principal.user_id, data.participant_id) if is_direct else None
    if key is not None:
        existing = await uow.conversations.get_active_direct(key)
        if existing is not None:
            logger.info("Found existing direct conversation %s", existing.id)
            return await _load_view(existing, uow), False

    now = datetime.now(timezone.utc)
    conversation = Conversation(
        id=uuid.uuid4(),
        type=data.type.value,
        title=None if is_direct else data.title,
        description=None if is_direct else data.description,
        image_url=None,
        is_active=True,
        direct_key=key,
        last_message_id=None,
        last_message_content=None,
        last_message_at=None,
        last_message_sender=None,
        created_at=now,
        updated_at=now,
    )

    if key is not None:
        conversation, created = await uow.conversations_w.create_direct_if_not_exists(conversation)
        if not created:
            # Lost a race with a concurrent create for the same pair.
            logger.info("Direct conversation %s created concurrently", conversation.id)
            return await _load_view(conversation, uow), False
    else:
        conversation = await uow.conversations_w.create(conversation)

    for user_id in member_ids:
        await uow.participants_w.add(
            Participant(conversation_id=conversation.id, user_id=user_id, joined_at=now)
        )
    await uow.commit()

    logger.info(
        "Created %s conversation %s with %d participants",
        conversation.type,
        conversation.id,
        len(member_ids),
    )
    return (
        ConversationView(
            conversation=conversation,
            participants=[users[uid] for uid in member_ids if uid in users],
        ),
        True,
    )


async def get_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> ConversationView:
    conversation = await assert_conversation_access(
        principal, conversation_id, uow.conversations,
    )
    return await _load_view(conversation, uow)


async def _load_view(conversation: Conversation, uow: UnitOfWork) -> ConversationView:
    members = await uow.participants.list_participants(conversation.id)
    users = await uow.users.get_many(p.user_id for p in members)
    return ConversationView(
        conversation=conversation,
        participants=[users[p.user_id] for p in members if p.user_id in users],
    )
