from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.domain.entities.conversation import Conversation, last_message_preview
from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.enums import ConversationType
from messaging_service.infrastructure.db.mappers import conversation as mapper
from messaging_service.infrastructure.db.models.conversation import ConversationModel
from messaging_service.infrastructure.db.models.participant import ParticipantModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(
            ConversationModel, conversation_id, populate_existing=True,
        )
        return mapper.model_to_entity(result) if result else None

    async def get_for_participant(
        self,
        conversation_id: UUID,
        user_id: str,
    ) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .join(
                ParticipantModel,
                ParticipantModel.conversation_id == ConversationModel.id,
            )
            .where(
                ConversationModel.id == conversation_id,
                ParticipantModel.user_id == user_id,
                ParticipantModel.left_at.is_(None),
            )
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def get_active_direct(self, direct_key: str) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(
                ConversationModel.type == ConversationType.DIRECT,
                ConversationModel.direct_key == direct_key,
                ConversationModel.is_active.is_(True),
            )
            .order_by(ConversationModel.created_at.asc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(self, user_id: str) -> list[Conversation]:
        stmt = (
            select(ConversationModel)
            .join(
                ParticipantModel,
                ParticipantModel.conversation_id == ConversationModel.id,
            )
            .where(
                ParticipantModel.user_id == user_id,
                ParticipantModel.left_at.is_(None),
                ConversationModel.is_active.is_(True),
            )
            .order_by(
                func.coalesce(
                    ConversationModel.last_message_at, ConversationModel.created_at,
                ).desc(),
                ConversationModel.id,
            )
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, conversation: Conversation) -> Conversation:
        model = mapper.entity_to_model(conversation)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def create_direct_if_not_exists(
        self,
        conversation: Conversation,
    ) -> tuple[Conversation, bool]:
        """Insert guarded by the partial unique index on direct_key."""
        assert conversation.direct_key is not None
        stmt = (
            pg_insert(ConversationModel)
            .values(**mapper.entity_to_values(conversation))
            .on_conflict_do_nothing(
                index_elements=["direct_key"],
                index_where=text("is_active AND direct_key IS NOT NULL"),
            )
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.model_to_entity(row), True

        # Conflict: another transaction created the pair first
        existing = await ConversationReaderRepo(self._session).get_active_direct(
            conversation.direct_key,
        )
        assert existing is not None
        return existing, False

    async def set_last_message(
        self,
        conversation_id: UUID,
        message: Message | None,
    ) -> None:
        if message is None:
            values = {
                "last_message_id": None,
                "last_message_content": None,
                "last_message_at": None,
                "last_message_sender": None,
            }
        else:
            values = {
                "last_message_id": message.id,
                "last_message_content": last_message_preview(
                    message.content, message.has_attachment,
                ),
                "last_message_at": message.created_at,
                "last_message_sender": message.sender_id,
            }
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(**values)
        )
        await self._session.execute(stmt)
