from __future__ import annotations

from typing import Protocol
from uuid import UUID

from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.entities.message import Message


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_for_participant(
        self, conversation_id: UUID, user_id: str,
    ) -> Conversation | None:
        """Return the conversation only if user_id is an active participant."""
        ...

    async def get_active_direct(self, direct_key: str) -> Conversation | None: ...

    async def list_for_user(self, user_id: str) -> list[Conversation]:
        """Active conversations where user_id is an active participant."""
        ...


class ConversationWriter(Protocol):
    async def create(self, conversation: Conversation) -> Conversation: ...

    async def create_direct_if_not_exists(
        self, conversation: Conversation,
    ) -> tuple[Conversation, bool]:
        """Insert a direct conversation. On direct_key conflict return the existing one."""
        ...

    async def set_last_message(
        self, conversation_id: UUID, message: Message | None,
    ) -> None:
        """Refresh the cached last-message columns. None clears them."""
        ...
