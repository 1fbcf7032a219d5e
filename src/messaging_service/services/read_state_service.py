from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import ValidationError
from messaging_service.application.policies.permissions import assert_conversation_access
from messaging_service.application.ports.bus import EventPublisher
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.events.read_receipts import ConversationRead
from messaging_service.domain.value_objects.enums import ConversationAction
from messaging_service.services.events import publish_event

logger = logging.getLogger(__name__)


async def apply_conversation_action(
    conversation_id: uuid.UUID,
    principal: Principal,
    action: str,
    uow: UnitOfWork,
    publisher: EventPublisher | None = None,
) -> int:
    """Dispatch a conversation-level action. Access is checked before the action."""
    await assert_conversation_access(principal, conversation_id, uow.conversations)
    if action != ConversationAction.MARK_ALL_READ:
        raise ValidationError("Invalid action")
    return await mark_all_read(conversation_id, principal, uow, publisher)


async def mark_all_read(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    publisher: EventPublisher | None = None,
) -> int:
    """Mark every unread message addressed to the caller as read.

    Idempotent. Returns the number of messages that changed state.
    """
    await assert_conversation_access(principal, conversation_id, uow.conversations)

    now = datetime.now(timezone.utc)
    updated = await uow.messages_w.mark_all_read(conversation_id, principal.user_id, now)
    await uow.commit()

    if updated:
        logger.info(
            "Marked %d messages read in %s for %s",
            updated,
            conversation_id,
            principal.user_id,
        )
        await publish_event(
            publisher,
            ConversationRead(
                conversation_id=conversation_id,
                reader_id=principal.user_id,
                updated_count=updated,
                read_at=now,
            ),
        )
    return updated
