from __future__ import annotations

from datetime import datetime
from typing import Iterable, Protocol
from uuid import UUID

from messaging_service.domain.entities.message import Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def get_many(self, message_ids: Iterable[UUID]) -> dict[UUID, Message]: ...

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        limit: int = 50,
    ) -> list[Message]:
        """Non-deleted messages, oldest first."""
        ...

    async def count_messages(self, conversation_id: UUID) -> int: ...

    async def latest_for_conversations(
        self, conversation_ids: Iterable[UUID],
    ) -> dict[UUID, Message]: ...

    async def count_unread_by_conversation(
        self, receiver_id: str, conversation_ids: Iterable[UUID],
    ) -> dict[UUID, int]: ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def mark_read(self, message_id: UUID, ts: datetime) -> None: ...

    async def mark_all_read(
        self, conversation_id: UUID, receiver_id: str, ts: datetime,
    ) -> int:
        """Mark every unread message addressed to receiver_id. Returns rows changed."""
        ...

    async def soft_delete(self, message_id: UUID, ts: datetime) -> None: ...
