from __future__ import annotations

import asyncio
import uuid

import pytest

from office_chat.application.dto.conversation import CreateConversationDTO
from office_chat.application.dto.principal import Principal
from office_chat.application.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from office_chat.domain.value_objects.enums import ConversationType, MessageType
from office_chat.services import conversation_service
from tests.conftest import FakeUoW, at


@pytest.mark.asyncio
async def test_direct_conversation_created_once(alice, uow):
    conv, created = await conversation_service.get_or_create_direct_conversation(alice, 2, uow)

    assert created is True
    assert conv.type == ConversationType.DIRECT
    assert conv.direct_key == "1:2"
    assert await uow.memberships.list_member_ids(conv.id) == [1, 2]
    assert uow.committed is True


@pytest.mark.asyncio
async def test_direct_conversation_is_order_independent(alice, bob, uow):
    first, _ = await conversation_service.get_or_create_direct_conversation(alice, 2, uow)
    second, created = await conversation_service.get_or_create_direct_conversation(bob, 1, uow)

    assert created is False
    assert second.id == first.id
    assert len(uow.db.conversations) == 1


@pytest.mark.asyncio
async def test_concurrent_direct_requests_converge(db, alice, bob):
    """Both sides open the chat at the same moment: one row, two memberships."""
    (conv_a, created_a), (conv_b, created_b) = await asyncio.gather(
        conversation_service.get_or_create_direct_conversation(alice, 2, FakeUoW(db)),
        conversation_service.get_or_create_direct_conversation(bob, 1, FakeUoW(db)),
    )

    assert conv_a.id == conv_b.id
    assert sorted([created_a, created_b]) == [False, True]
    assert len(db.conversations) == 1
    assert sorted(m.user_id for m in db.memberships) == [1, 2]


@pytest.mark.asyncio
async def test_direct_conversation_with_self_rejected(alice, uow):
    with pytest.raises(InvalidArgumentError):
        await conversation_service.get_or_create_direct_conversation(alice, 1, uow)


@pytest.mark.asyncio
async def test_direct_conversation_requires_target(alice, uow):
    with pytest.raises(InvalidArgumentError):
        await conversation_service.get_or_create_direct_conversation(alice, None, uow)


@pytest.mark.asyncio
async def test_direct_conversation_unknown_user(alice, uow):
    with pytest.raises(NotFoundError):
        await conversation_service.get_or_create_direct_conversation(alice, 999, uow)
    assert uow.db.conversations == {}


@pytest.mark.asyncio
async def test_create_group_makes_creator_admin(alice, uow):
    summary = await conversation_service.create_conversation(
        alice,
        CreateConversationDTO(name="  Design review ", type="group", member_ids=[2, 3, 1, 2]),
        uow,
    )

    assert summary.name == "Design review"
    assert summary.members == [1, 2, 3]
    creator = await uow.memberships.get(summary.id, 1)
    assert creator is not None and creator.is_admin is True
    other = await uow.memberships.get(summary.id, 2)
    assert other is not None and other.is_admin is False


@pytest.mark.asyncio
async def test_create_group_posts_system_notice(alice, bob, uow):
    summary = await conversation_service.create_conversation(
        alice, CreateConversationDTO(name="Ops", type="group", member_ids=[2]), uow,
    )

    [notice] = uow.db.messages_in(summary.id)
    assert notice.sender_id is None
    assert notice.type == MessageType.SYSTEM
    assert notice.body == "New group created"
    # a system notice never counts as unread
    [listed] = await conversation_service.list_conversations(bob, uow)
    assert listed.unread == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, conv_type",
    [(None, "group"), ("", "group"), ("   ", "group"), ("Ops", None), ("Ops", "channel")],
)
async def test_create_conversation_validation(alice, uow, name, conv_type):
    with pytest.raises(InvalidArgumentError):
        await conversation_service.create_conversation(
            alice, CreateConversationDTO(name=name, type=conv_type, member_ids=[2]), uow,
        )
    assert uow.db.conversations == {}


@pytest.mark.asyncio
async def test_create_direct_type_reuses_pair(alice, uow):
    existing = uow.db.add_direct(1, 2)

    summary = await conversation_service.create_conversation(
        alice, CreateConversationDTO(name="ignored", type="direct", member_ids=[2]), uow,
    )

    assert summary.id == existing.id
    assert summary.other_user_id == 2
    assert summary.name == "User 2"


@pytest.mark.asyncio
async def test_create_direct_type_needs_one_member(alice, uow):
    with pytest.raises(InvalidArgumentError):
        await conversation_service.create_conversation(
            alice, CreateConversationDTO(name="x", type="direct", member_ids=[2, 3]), uow,
        )


@pytest.mark.asyncio
async def test_list_conversations_orders_by_latest_message(alice, db, uow):
    quiet = db.add_conversation([1, 2], name="Quiet", created_at=at(0))
    busy = db.add_conversation([1, 3], name="Busy", created_at=at(1))
    empty = db.add_conversation([1, 2, 3], name="Empty", created_at=at(2))
    db.add_conversation([2, 3], name="Not mine", created_at=at(3))
    db.add_message(conversation_id=quiet.id, sender_id=2, body="old", created_at=at(10))
    db.add_message(conversation_id=busy.id, sender_id=3, body="new", created_at=at(20))

    summaries = await conversation_service.list_conversations(alice, uow)

    assert [s.id for s in summaries] == [busy.id, quiet.id, empty.id]
    assert summaries[0].last_message == "new"
    assert summaries[2].last_message is None
    assert summaries[2].last_message_at is None


@pytest.mark.asyncio
async def test_list_conversations_unread_counts_only_others(alice, db, uow):
    conv = db.add_conversation([1, 2])
    db.add_message(conversation_id=conv.id, sender_id=1, created_at=at(1))
    db.add_message(conversation_id=conv.id, sender_id=2, created_at=at(2))
    db.add_message(conversation_id=conv.id, sender_id=2, created_at=at(3))
    db.add_message(conversation_id=conv.id, sender_id=2, is_read=True, created_at=at(4))

    [summary] = await conversation_service.list_conversations(alice, uow)

    assert summary.unread == 2


@pytest.mark.asyncio
async def test_list_conversations_names_direct_after_counterpart(alice, db, uow):
    conv = db.add_direct(1, 3)

    [summary] = await conversation_service.list_conversations(alice, uow)

    assert summary.id == conv.id
    assert summary.name == "User 3"
    assert summary.other_user_id == 3
    assert summary.email == "user3@example.com"
    assert summary.avatar == "https://cdn.example.com/avatars/3.png"


@pytest.mark.asyncio
async def test_add_member_by_admin(alice, db, uow):
    conv = db.add_conversation([1, 2], admin_id=1)

    membership = await conversation_service.add_member(conv.id, alice, 3, uow)

    assert membership.user_id == 3
    assert await uow.memberships.is_member(conv.id, 3)
    assert db.messages_in(conv.id)[-1].body == "User 3 was added"


@pytest.mark.asyncio
async def test_add_member_requires_admin(bob, db, uow):
    conv = db.add_conversation([1, 2], admin_id=1)

    with pytest.raises(ForbiddenError):
        await conversation_service.add_member(conv.id, bob, 3, uow)


@pytest.mark.asyncio
async def test_add_member_twice_conflicts(alice, db, uow):
    conv = db.add_conversation([1, 2], admin_id=1)

    with pytest.raises(ConflictError):
        await conversation_service.add_member(conv.id, alice, 2, uow)


@pytest.mark.asyncio
async def test_add_member_to_direct_rejected(alice, db, uow):
    conv = db.add_direct(1, 2, admin_id=1)

    with pytest.raises(InvalidArgumentError):
        await conversation_service.add_member(conv.id, alice, 3, uow)


@pytest.mark.asyncio
async def test_add_member_unknown_conversation(alice, uow):
    with pytest.raises(NotFoundError):
        await conversation_service.add_member(uuid.uuid4(), alice, 3, uow)


@pytest.mark.asyncio
async def test_add_member_unknown_user(alice, db, uow):
    conv = db.add_conversation([1], admin_id=1)

    with pytest.raises(NotFoundError):
        await conversation_service.add_member(conv.id, Principal(subject_id=1), 404, uow)


@pytest.mark.asyncio
async def test_add_member_losing_a_race_conflicts(alice, db, uow, monkeypatch):
    conv = db.add_conversation([1, 2], admin_id=1)

    async def _stale_is_member(conversation_id, user_id):
        # another request added the user after this one checked
        return False

    monkeypatch.setattr(uow.memberships, "is_member", _stale_is_member)

    with pytest.raises(ConflictError):
        await conversation_service.add_member(conv.id, alice, 2, uow)

    assert uow.rolled_back is True
    assert db.messages_in(conv.id) == []
    assert sorted(m.user_id for m in db.memberships) == [1, 2]
