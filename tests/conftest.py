"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable
from uuid import UUID

import pytest

from messaging_service.application.dto.principal import Principal
from messaging_service.domain.entities.conversation import Conversation, last_message_preview
from messaging_service.domain.entities.message import Message
from messaging_service.domain.entities.participant import Participant
from messaging_service.domain.entities.user import User
from messaging_service.domain.value_objects.enums import ConversationType, MessageType
from messaging_service.domain.value_objects.ids import direct_key

T0 = datetime(2025, 5, 29, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id="u-alice", username="alice")


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id="u-bob", username="bob")


@pytest.fixture
def mallory() -> Principal:
    return Principal(user_id="u-mallory", username="mallory")


def make_user(user_id: str, *, deactivated: bool = False) -> User:
    return User(
        id=user_id,
        username=user_id.removeprefix("u-"),
        profile_photo_url=f"https://cdn.example.com/{user_id}.jpg",
        is_online=False,
        last_seen_at=None,
        deactivated_at=T0 if deactivated else None,
    )


def make_conversation(
    *,
    conversation_id: UUID | None = None,
    type: str = ConversationType.DIRECT,
    key: str | None = None,
    is_active: bool = True,
    created_at: datetime = T0,
) -> Conversation:
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        type=type,
        title=None,
        description=None,
        image_url=None,
        is_active=is_active,
        direct_key=key,
        last_message_id=None,
        last_message_content=None,
        last_message_at=None,
        last_message_sender=None,
        created_at=created_at,
        updated_at=created_at,
    )


def make_message(
    *,
    conversation_id: UUID,
    sender_id: str,
    receiver_id: str,
    content: str = "hello",
    created_at: datetime = T0,
    is_read: bool = False,
    is_deleted: bool = False,
    reply_to_id: UUID | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        message_type=MessageType.TEXT,
        attachment_url=None,
        attachment_type=None,
        file_name=None,
        reply_to_id=reply_to_id,
        is_delivered=True,
        delivered_at=created_at,
        is_read=is_read,
        read_at=created_at if is_read else None,
        is_deleted=is_deleted,
        deleted_at=created_at if is_deleted else None,
        created_at=created_at,
        updated_at=created_at,
    )


@dataclass
class FakeUserReader:
    _users: dict[str, User] = field(default_factory=dict)

    async def get_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def get_many(self, user_ids: Iterable[str]) -> dict[str, User]:
        return {uid: self._users[uid] for uid in user_ids if uid in self._users}


@dataclass
class FakeParticipantReader:
    _participants: list[Participant] = field(default_factory=list)

    async def _is_member(self, conversation_id: UUID, user_id: str) -> bool:
        return any(
            p.conversation_id == conversation_id and p.user_id == user_id and p.is_active
            for p in self._participants
        )

    async def list_participants(self, conversation_id: UUID) -> list[Participant]:
        members = [
            p for p in self._participants
            if p.conversation_id == conversation_id and p.is_active
        ]
        return sorted(members, key=lambda p: (p.joined_at, p.user_id))

    async def list_for_conversations(
        self, conversation_ids: Iterable[UUID],
    ) -> dict[UUID, list[Participant]]:
        return {cid: await self.list_participants(cid) for cid in conversation_ids}


@dataclass
class FakeParticipantWriter:
    _reader: FakeParticipantReader

    async def add(self, participant: Participant) -> None:
        self._reader._participants.append(participant)


@dataclass
class FakeConversationReader:
    _participants: FakeParticipantReader
    _store: dict[UUID, Conversation] = field(default_factory=dict)

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_for_participant(self, conversation_id: UUID, user_id: str) -> Conversation | None:
        conversation = self._store.get(conversation_id)
        if conversation is None:
            return None
        if not await self._participants._is_member(conversation_id, user_id):
            return None
        return conversation

    async def get_active_direct(self, key: str) -> Conversation | None:
        for c in self._store.values():
            if c.type == ConversationType.DIRECT and c.direct_key == key and c.is_active:
                return c
        return None

    async def list_for_user(self, user_id: str) -> list[Conversation]:
        result = [
            c for c in self._store.values()
            if c.is_active and await self._participants._is_member(c.id, user_id)
        ]
        return sorted(result, key=lambda c: c.last_message_at or c.created_at, reverse=True)


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader
    _journal: list[str]

    async def create(self, conversation: Conversation) -> Conversation:
        self._reader._store[conversation.id] = conversation
        self._journal.append("create_conversation")
        return conversation

    async def create_direct_if_not_exists(
        self, conversation: Conversation,
    ) -> tuple[Conversation, bool]:
        existing = await self._reader.get_active_direct(conversation.direct_key or "")
        if existing is not None:
            return existing, False
        return await self.create(conversation), True

    async def set_last_message(self, conversation_id: UUID, message: Message | None) -> None:
        current = self._reader._store[conversation_id]
        self._reader._store[conversation_id] = dataclasses.replace(
            current,
            last_message_id=message.id if message else None,
            last_message_content=(
                last_message_preview(message.content, message.has_attachment) if message else None
            ),
            last_message_at=message.created_at if message else None,
            last_message_sender=message.sender_id if message else None,
        )
        self._journal.append("set_last_message")


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return next((m for m in self._messages if m.id == message_id), None)

    async def get_many(self, message_ids: Iterable[UUID]) -> dict[UUID, Message]:
        wanted = set(message_ids)
        return {m.id: m for m in self._messages if m.id in wanted}

    def _visible(self, conversation_id: UUID) -> list[Message]:
        return sorted(
            (m for m in self._messages if m.conversation_id == conversation_id and not m.is_deleted),
            key=lambda m: (m.created_at, str(m.id)),
        )

    async def list_messages(
        self, conversation_id: UUID, *, offset: int = 0, limit: int = 50,
    ) -> list[Message]:
        return self._visible(conversation_id)[offset:offset + limit]

    async def count_messages(self, conversation_id: UUID) -> int:
        return len(self._visible(conversation_id))

    async def latest_for_conversations(
        self, conversation_ids: Iterable[UUID],
    ) -> dict[UUID, Message]:
        result: dict[UUID, Message] = {}
        for cid in conversation_ids:
            visible = self._visible(cid)
            if visible:
                result[cid] = visible[-1]
        return result

    async def count_unread_by_conversation(
        self, receiver_id: str, conversation_ids: Iterable[UUID],
    ) -> dict[UUID, int]:
        result: dict[UUID, int] = {}
        for cid in conversation_ids:
            count = sum(
                1 for m in self._visible(cid)
                if m.receiver_id == receiver_id and not m.is_read
            )
            if count:
                result[cid] = count
        return result


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    _journal: list[str]

    def _replace(self, message_id: UUID, **changes: Any) -> None:
        for i, m in enumerate(self._reader._messages):
            if m.id == message_id:
                self._reader._messages[i] = dataclasses.replace(m, **changes)

    async def create(self, message: Message) -> Message:
        self._reader._messages.append(message)
        self._journal.append("create_message")
        return message

    async def mark_read(self, message_id: UUID, ts: datetime) -> None:
        self._replace(message_id, is_read=True, read_at=ts)

    async def mark_all_read(self, conversation_id: UUID, receiver_id: str, ts: datetime) -> int:
        targets = [
            m.id for m in self._reader._messages
            if m.conversation_id == conversation_id and m.receiver_id == receiver_id and not m.is_read
        ]
        for message_id in targets:
            self._replace(message_id, is_read=True, read_at=ts)
        return len(targets)

    async def soft_delete(self, message_id: UUID, ts: datetime) -> None:
        self._replace(message_id, is_deleted=True, deleted_at=ts)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    participants: FakeParticipantReader = field(default_factory=FakeParticipantReader)
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    journal: list[str] = field(default_factory=list)
    conversations: FakeConversationReader | None = None
    conversations_w: FakeConversationWriter | None = None
    participants_w: FakeParticipantWriter | None = None
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.conversations is None:
            self.conversations = FakeConversationReader(self.participants)
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations, self.journal)
        if self.participants_w is None:
            self.participants_w = FakeParticipantWriter(self.participants)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages, self.journal)

    def add_user(self, user_id: str, *, deactivated: bool = False) -> User:
        user = make_user(user_id, deactivated=deactivated)
        self.users._users[user_id] = user
        return user

    def add_conversation(
        self,
        *members: str,
        type: str = ConversationType.DIRECT,
        is_active: bool = True,
        created_at: datetime = T0,
    ) -> Conversation:
        key = direct_key(*members) if type == ConversationType.DIRECT and len(members) == 2 else None
        conversation = make_conversation(
            type=type, key=key, is_active=is_active, created_at=created_at,
        )
        self.conversations._store[conversation.id] = conversation
        for i, user_id in enumerate(members):
            self.participants._participants.append(
                Participant(
                    conversation_id=conversation.id,
                    user_id=user_id,
                    joined_at=created_at + timedelta(microseconds=i),
                )
            )
        return conversation

    def add_message(self, message: Message) -> Message:
        self.messages._messages.append(message)
        return message

    def conversation(self, conversation_id: UUID) -> Conversation:
        return self.conversations._store[conversation_id]

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True
        self.journal.append("commit")

    async def rollback(self) -> None:
        pass


@dataclass
class FakePublisher:
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        self.events.append((event_type, payload))

    def types(self) -> list[str]:
        return [event_type for event_type, _ in self.events]


class BrokenPublisher:
    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        raise ConnectionError("redis is down")


@pytest.fixture
def uow(alice: Principal, bob: Principal, mallory: Principal) -> FakeUoW:
    uow = FakeUoW()
    for principal in (alice, bob, mallory):
        uow.add_user(principal.user_id)
    return uow


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()
