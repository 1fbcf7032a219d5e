"""Seed development data: creates tables, sample users and a direct conversation."""
from __future__ import annotations

import asyncio
import logging

from sqlalchemy.dialects.postgresql import insert as pg_insert

from messaging_service.application.dto.conversation import CreateConversationDTO
from messaging_service.application.dto.message import ValidationFailure, validate_post_message
from messaging_service.application.dto.principal import Principal
from messaging_service.infrastructure.db.base import Base
from messaging_service.infrastructure.db.models import UserModel
from messaging_service.infrastructure.db.session import AsyncSessionLocal, engine
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW
from messaging_service.services import conversation_service, message_service

logger = logging.getLogger(__name__)

USERS = [
    {"id": "dev-alice", "username": "alice"},
    {"id": "dev-bob", "username": "bob"},
]

SCRIPT = [
    ("dev-alice", "Hey Bob! Loved your latest video."),
    ("dev-bob", "Thanks! Took me a week to edit."),
    ("dev-alice", "Worth it. Are you doing a part two?"),
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        await _seed_rows()
    finally:
        await engine.dispose()


async def _seed_rows() -> None:
    async with AsyncSessionLocal() as session:
        await session.execute(
            pg_insert(UserModel).values(USERS).on_conflict_do_nothing(index_elements=["id"])
        )
        await session.commit()

        async with SqlAlchemyUoW(session) as uow:
            await _seed_conversation(uow)


async def _seed_conversation(uow: SqlAlchemyUoW) -> None:
    alice = Principal(user_id="dev-alice", username="alice")
    view, created = await conversation_service.create_conversation(
        alice, CreateConversationDTO(participant_id="dev-bob"), uow,
    )
    if not created:
        logger.info("Conversation %s already seeded", view.conversation.id)
        return

    for sender_id, text in SCRIPT:
        data = validate_post_message(text)
        assert not isinstance(data, ValidationFailure)
        await message_service.post_message(
            view.conversation.id, Principal(user_id=sender_id), data, uow,
        )

    logger.info("Seeded conversation %s with %d messages", view.conversation.id, len(SCRIPT))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
