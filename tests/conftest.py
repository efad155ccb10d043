"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import dataclasses
import json
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import pytest

from office_chat.application.dto.conversation import ConversationSummary
from office_chat.application.dto.principal import Principal
from office_chat.application.exceptions import ConflictError
from office_chat.domain.entities.conversation import Conversation, direct_pair_key
from office_chat.domain.entities.membership import Membership
from office_chat.domain.entities.message import Message
from office_chat.domain.entities.user import UserProfile
from office_chat.domain.value_objects.enums import ConversationType, MessageType

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_profile(user_id: int, name: str | None = None) -> UserProfile:
    return UserProfile(
        id=user_id,
        name=name or f"User {user_id}",
        email=f"user{user_id}@example.com",
        avatar_url=f"https://cdn.example.com/avatars/{user_id}.png",
        role="employee",
    )


def make_conversation(
    *,
    conversation_id: UUID | None = None,
    type: str = ConversationType.GROUP,
    name: str | None = "Team",
    direct_key: str | None = None,
    created_at: datetime | None = None,
) -> Conversation:
    ts = created_at or datetime.now(timezone.utc)
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        type=type,
        name=name,
        direct_key=direct_key,
        created_at=ts,
        updated_at=ts,
    )


def make_message(
    *,
    conversation_id: UUID,
    sender_id: int | None = 1,
    body: str | None = "hello",
    is_read: bool = False,
    created_at: datetime | None = None,
    client_msg_id: UUID | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        type=MessageType.TEXT if sender_id is not None else MessageType.SYSTEM,
        body=body,
        attachment_url=None,
        attachment_type=None,
        attachment_name=None,
        is_read=is_read,
        client_msg_id=client_msg_id,
        created_at=created_at or datetime.now(timezone.utc),
    )


def at(minutes: int) -> datetime:
    """Deterministic timestamp ``minutes`` after a fixed epoch."""
    return _EPOCH + timedelta(minutes=minutes)


@dataclass
class FakeDatabase:
    """Shared in-memory store; several FakeUoW instances may point at one."""

    conversations: dict[UUID, Conversation] = field(default_factory=dict)
    memberships: list[Membership] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    users: dict[int, UserProfile] = field(default_factory=dict)
    inactive_user_ids: set[int] = field(default_factory=set)

    def add_users(self, *user_ids: int) -> None:
        for uid in user_ids:
            self.users[uid] = make_profile(uid)

    def add_conversation(
        self,
        members: Iterable[int],
        *,
        admin_id: int | None = None,
        **kwargs: Any,
    ) -> Conversation:
        conv = make_conversation(**kwargs)
        self.conversations[conv.id] = conv
        for uid in members:
            self.memberships.append(
                Membership(
                    conversation_id=conv.id,
                    user_id=uid,
                    is_admin=uid == admin_id,
                    joined_at=conv.created_at,
                )
            )
        return conv

    def add_direct(self, user_a: int, user_b: int, **kwargs: Any) -> Conversation:
        return self.add_conversation(
            [user_a, user_b],
            type=ConversationType.DIRECT,
            name=None,
            direct_key=direct_pair_key(user_a, user_b),
            **kwargs,
        )

    def add_message(self, **kwargs: Any) -> Message:
        msg = make_message(**kwargs)
        self.messages.append(msg)
        return msg

    def messages_in(self, conversation_id: UUID) -> list[Message]:
        return [m for m in self.messages if m.conversation_id == conversation_id]


@dataclass
class FakeConversationReader:
    _db: FakeDatabase

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._db.conversations.get(conversation_id)

    async def get_direct_by_key(self, direct_key: str) -> Conversation | None:
        found = next(
            (
                conv for conv in self._db.conversations.values()
                if conv.type == ConversationType.DIRECT and conv.direct_key == direct_key
            ),
            None,
        )
        # Yield so concurrent callers can interleave between lookup and insert
        await asyncio.sleep(0)
        return found

    async def list_summaries_for_user(self, user_id: int) -> list[ConversationSummary]:
        mine = {m.conversation_id for m in self._db.memberships if m.user_id == user_id}
        summaries: list[tuple[ConversationSummary, datetime]] = []
        for conv in self._db.conversations.values():
            if conv.id not in mine:
                continue
            messages = self._db.messages_in(conv.id)
            last = max(messages, key=lambda m: m.created_at) if messages else None
            unread = sum(1 for m in messages if m.sender_id != user_id and not m.is_read)
            members = sorted(
                m.user_id for m in self._db.memberships if m.conversation_id == conv.id
            )
            summaries.append((
                ConversationSummary(
                    id=conv.id,
                    type=conv.type,
                    name=conv.name,
                    last_message=last.body if last else None,
                    last_message_at=last.created_at if last else None,
                    unread=unread,
                    members=members,
                ),
                conv.created_at,
            ))
        summaries.sort(key=lambda item: item[1], reverse=True)
        with_messages = [s for s, _ in summaries if s.last_message_at is not None]
        with_messages.sort(key=lambda s: s.last_message_at, reverse=True)
        return with_messages + [s for s, _ in summaries if s.last_message_at is None]


@dataclass
class FakeConversationWriter:
    _db: FakeDatabase

    async def create(self, conversation: Conversation) -> Conversation:
        self._db.conversations[conversation.id] = conversation
        return conversation

    async def create_direct_if_not_exists(
        self, conversation: Conversation,
    ) -> tuple[Conversation, bool]:
        for existing in self._db.conversations.values():
            if existing.direct_key == conversation.direct_key:
                return existing, False
        self._db.conversations[conversation.id] = conversation
        return conversation, True


@dataclass
class FakeMembershipReader:
    _db: FakeDatabase

    async def is_member(self, conversation_id: UUID, user_id: int) -> bool:
        return await self.get(conversation_id, user_id) is not None

    async def get(self, conversation_id: UUID, user_id: int) -> Membership | None:
        for m in self._db.memberships:
            if m.conversation_id == conversation_id and m.user_id == user_id:
                return m
        return None

    async def list_member_ids(self, conversation_id: UUID) -> list[int]:
        return sorted(m.user_id for m in self._db.memberships if m.conversation_id == conversation_id)


@dataclass
class FakeMembershipWriter:
    _db: FakeDatabase

    async def add(self, membership: Membership) -> None:
        for m in self._db.memberships:
            if m.conversation_id == membership.conversation_id and m.user_id == membership.user_id:
                raise ConflictError("User is already a member")
        self._db.memberships.append(membership)


@dataclass
class FakeMessageReader:
    _db: FakeDatabase

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        return sorted(self._db.messages_in(conversation_id), key=lambda m: m.created_at)


@dataclass
class FakeMessageWriter:
    _db: FakeDatabase
    fail_with: Exception | None = None
    # inserted but not yet committed; rollback removes them again
    pending: list[Message] = field(default_factory=list)

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        if self.fail_with is not None:
            raise self.fail_with
        if message.client_msg_id is not None:
            existing = await self.get_by_client_msg_id(
                message.conversation_id, message.sender_id, message.client_msg_id,
            )
            if existing is not None:
                return existing, False
        self._db.messages.append(message)
        self.pending.append(message)
        return message, True

    async def get_by_client_msg_id(
        self,
        conversation_id: UUID,
        sender_id: int | None,
        client_msg_id: UUID,
    ) -> Message | None:
        for m in self._db.messages:
            if (
                m.conversation_id == conversation_id
                and m.sender_id == sender_id
                and m.client_msg_id == client_msg_id
            ):
                return m
        return None

    async def mark_read(self, conversation_id: UUID, reader_id: int) -> int:
        updated = 0
        for i, m in enumerate(self._db.messages):
            if m.conversation_id == conversation_id and m.sender_id != reader_id and not m.is_read:
                self._db.messages[i] = dataclasses.replace(m, is_read=True)
                updated += 1
        return updated


@dataclass
class FakeUserDirectory:
    _db: FakeDatabase

    async def get_profiles(self, user_ids: Iterable[int]) -> dict[int, UserProfile]:
        return {uid: self._db.users[uid] for uid in set(user_ids) if uid in self._db.users}

    async def exists(self, user_id: int) -> bool:
        return user_id in self._db.users

    async def list_active(self, *, exclude_id: int) -> list[UserProfile]:
        return sorted(
            (
                u for u in self._db.users.values()
                if u.id != exclude_id and u.id not in self._db.inactive_user_ids
            ),
            key=lambda u: u.name,
        )


class FakeUoW:
    """In-memory UoW for unit tests."""

    def __init__(self, db: FakeDatabase | None = None) -> None:
        self.db = db if db is not None else FakeDatabase()
        self.conversations = FakeConversationReader(self.db)
        self.conversations_w = FakeConversationWriter(self.db)
        self.memberships = FakeMembershipReader(self.db)
        self.memberships_w = FakeMembershipWriter(self.db)
        self.messages = FakeMessageReader(self.db)
        self.messages_w = FakeMessageWriter(self.db)
        self.users = FakeUserDirectory(self.db)
        self.committed = False
        self.rolled_back = False

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.committed = True
        self.messages_w.pending.clear()

    async def rollback(self) -> None:
        self.rolled_back = True
        for msg in self.messages_w.pending:
            self.db.messages.remove(msg)
        self.messages_w.pending.clear()

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            await self.rollback()


class FakeWebSocket:
    """Records frames sent through ConnectionManager."""

    def __init__(self, *, fail: bool = False) -> None:
        self.accepted = False
        self.fail = fail
        self.sent: list[dict[str, Any]] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, raw: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(raw))

    def events(self, event_type: str) -> list[dict[str, Any]]:
        return [frame["data"] for frame in self.sent if frame["type"] == event_type]

    @property
    def types(self) -> list[str]:
        return [frame["type"] for frame in self.sent]


@pytest.fixture
def db() -> FakeDatabase:
    database = FakeDatabase()
    database.add_users(1, 2, 3)
    return database


@pytest.fixture
def uow(db: FakeDatabase) -> FakeUoW:
    return FakeUoW(db)


@pytest.fixture
def alice() -> Principal:
    return Principal(subject_id=1)


@pytest.fixture
def bob() -> Principal:
    return Principal(subject_id=2)


@pytest.fixture
def carol() -> Principal:
    return Principal(subject_id=3)
