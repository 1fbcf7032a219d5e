from __future__ import annotations

from datetime import datetime
from typing import Iterable
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from messaging_service.domain.entities.message import Message
from messaging_service.infrastructure.db.mappers import message as mapper
from messaging_service.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        result = await self._session.get(MessageModel, message_id, populate_existing=True)
        return mapper.model_to_entity(result) if result else None

    async def get_many(self, message_ids: Iterable[UUID]) -> dict[UUID, Message]:
        ids = list(message_ids)
        if not ids:
            return {}
        result = await self._session.execute(
            select(MessageModel).where(MessageModel.id.in_(ids))
        )
        return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        limit: int = 50,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.is_deleted.is_(False),
            )
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_messages(self, conversation_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.is_deleted.is_(False),
            )
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def latest_for_conversations(
        self,
        conversation_ids: Iterable[UUID],
    ) -> dict[UUID, Message]:
        ids = list(conversation_ids)
        if not ids:
            return {}
        ranked = (
            select(
                MessageModel,
                func.row_number()
                .over(
                    partition_by=MessageModel.conversation_id,
                    order_by=(MessageModel.created_at.desc(), MessageModel.id.desc()),
                )
                .label("rn"),
            )
            .where(
                MessageModel.conversation_id.in_(ids),
                MessageModel.is_deleted.is_(False),
            )
            .subquery()
        )
        latest = aliased(MessageModel, ranked)
        result = await self._session.execute(select(latest).where(ranked.c.rn == 1))
        return {m.conversation_id: mapper.model_to_entity(m) for m in result.scalars().all()}

    async def count_unread_by_conversation(
        self,
        receiver_id: str,
        conversation_ids: Iterable[UUID],
    ) -> dict[UUID, int]:
        ids = list(conversation_ids)
        if not ids:
            return {}
        stmt = (
            select(MessageModel.conversation_id, func.count())
            .where(
                MessageModel.conversation_id.in_(ids),
                MessageModel.receiver_id == receiver_id,
                MessageModel.is_read.is_(False),
                MessageModel.is_deleted.is_(False),
            )
            .group_by(MessageModel.conversation_id)
        )
        result = await self._session.execute(stmt)
        return {cid: int(count) for cid, count in result.all()}


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(self, message_id: UUID, ts: datetime) -> None:
        stmt = (
            update(MessageModel)
            .where(MessageModel.id == message_id, MessageModel.is_read.is_(False))
            .values(is_read=True, read_at=ts)
        )
        await self._session.execute(stmt)

    async def mark_all_read(
        self,
        conversation_id: UUID,
        receiver_id: str,
        ts: datetime,
    ) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.is_read.is_(False),
            )
            .values(is_read=True, read_at=ts)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def soft_delete(self, message_id: UUID, ts: datetime) -> None:
        stmt = (
            update(MessageModel)
            .where(MessageModel.id == message_id)
            .values(is_deleted=True, deleted_at=ts)
        )
        await self._session.execute(stmt)
