from __future__ import annotations

from collections import defaultdict
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.domain.entities.participant import Participant
from messaging_service.infrastructure.db.mappers import participant as mapper
from messaging_service.infrastructure.db.models.participant import ParticipantModel


class ParticipantReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_participants(self, conversation_id: UUID) -> list[Participant]:
        stmt = (
            select(ParticipantModel)
            .where(
                ParticipantModel.conversation_id == conversation_id,
                ParticipantModel.left_at.is_(None),
            )
            .order_by(ParticipantModel.joined_at.asc(), ParticipantModel.user_id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_conversations(
        self,
        conversation_ids: Iterable[UUID],
    ) -> dict[UUID, list[Participant]]:
        ids = list(conversation_ids)
        if not ids:
            return {}
        stmt = (
            select(ParticipantModel)
            .where(
                ParticipantModel.conversation_id.in_(ids),
                ParticipantModel.left_at.is_(None),
            )
            .order_by(ParticipantModel.joined_at.asc(), ParticipantModel.user_id.asc())
        )
        result = await self._session.execute(stmt)
        grouped: dict[UUID, list[Participant]] = defaultdict(list)
        for model in result.scalars().all():
            grouped[model.conversation_id].append(mapper.model_to_entity(model))
        return dict(grouped)


class ParticipantWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, participant: Participant) -> None:
        model = mapper.entity_to_model(participant)
        self._session.add(model)
        await self._session.flush()
