from __future__ import annotations

from uuid import UUID

from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import NotFoundError
from messaging_service.application.repositories.conversation import ConversationReader
from messaging_service.domain.entities.conversation import Conversation

CONVERSATION_NOT_FOUND = "Conversation not found or access denied"


async def assert_conversation_access(
    principal: Principal,
    conversation_id: UUID,
    conversations: ConversationReader,
) -> Conversation:
    """Raise unless the conversation exists and principal participates in it.

    Missing and inaccessible conversations raise the same error.
    """
    conversation = await conversations.get_for_participant(
        conversation_id, principal.user_id,
    )
    if conversation is None:
        raise NotFoundError(CONVERSATION_NOT_FOUND)
    return conversation
