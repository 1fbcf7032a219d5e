from __future__ import annotations

from typing import Iterable, Protocol
from uuid import UUID

from messaging_service.domain.entities.participant import Participant


class ParticipantReader(Protocol):
    async def list_participants(self, conversation_id: UUID) -> list[Participant]:
        """Active participants ordered by joined_at."""
        ...

    async def list_for_conversations(
        self, conversation_ids: Iterable[UUID],
    ) -> dict[UUID, list[Participant]]: ...


class ParticipantWriter(Protocol):
    async def add(self, participant: Participant) -> None: ...
