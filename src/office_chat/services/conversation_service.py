from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime, timezone

from office_chat.application.dto.conversation import ConversationSummary, CreateConversationDTO
from office_chat.application.dto.principal import Principal
from office_chat.application.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from office_chat.application.policies.permissions import assert_conversation_admin
from office_chat.application.uow import UnitOfWork
from office_chat.domain.entities.conversation import Conversation, direct_pair_key
from office_chat.domain.entities.membership import Membership
from office_chat.domain.entities.message import Message
from office_chat.domain.value_objects.enums import ConversationType, MessageType

logger = logging.getLogger(__name__)


async def list_conversations(
    principal: Principal,
    uow: UnitOfWork,
) -> list[ConversationSummary]:
    """Conversation list of a user, with direct chats named after the counterpart."""
    user_id = principal.subject_id
    summaries = await uow.conversations.list_summaries_for_user(user_id)

    counterparts = {
        summary.id: next((m for m in summary.members if m != user_id), None)
        for summary in summaries
        if summary.type == ConversationType.DIRECT
    }
    profiles = await uow.users.get_profiles(
        uid for uid in counterparts.values() if uid is not None
    )

    result: list[ConversationSummary] = []
    for summary in summaries:
        other_id = counterparts.get(summary.id)
        profile = profiles.get(other_id) if other_id is not None else None
        if profile is not None:
            summary = dataclasses.replace(
                summary,
                name=profile.name,
                avatar=profile.avatar_url,
                email=profile.email,
                other_user_id=profile.id,
            )
        result.append(summary)
    return result


async def get_or_create_direct_conversation(
    principal: Principal,
    target_user_id: int | None,
    uow: UnitOfWork,
) -> tuple[Conversation, bool]:
    """Return the direct conversation between the caller and target, creating it once.

    Returns (conversation, created). Concurrent callers for the same pair end
    up with the same conversation: the store rejects a second row for the
    pair key and hands back the winner.
    """
    user_id = principal.subject_id
    if target_user_id is None:
        raise InvalidArgumentError("target_user_id is required")
    if target_user_id == user_id:
        raise InvalidArgumentError("Cannot start a direct conversation with yourself")

    key = direct_pair_key(user_id, target_user_id)
    existing = await uow.conversations.get_direct_by_key(key)
    if existing is not None:
        return existing, False

    if not await uow.users.exists(target_user_id):
        raise NotFoundError("User not found")

    now = datetime.now(timezone.utc)
    async with uow:
        conversation, created = await uow.conversations_w.create_direct_if_not_exists(
            Conversation(
                id=uuid.uuid4(),
                type=ConversationType.DIRECT,
                name=None,
                direct_key=key,
                created_at=now,
                updated_at=now,
            )
        )
        if created:
            for member_id in (user_id, target_user_id):
                await uow.memberships_w.add(
                    Membership(
                        conversation_id=conversation.id,
                        user_id=member_id,
                        is_admin=False,
                        joined_at=now,
                    )
                )
            await uow.commit()
            logger.info(
                "Created direct conversation %s for %s", conversation.id, key,
            )
    return conversation, created


async def create_conversation(
    principal: Principal,
    data: CreateConversationDTO,
    uow: UnitOfWork,
) -> ConversationSummary:
    """Create a conversation with the caller as admin member."""
    if not data.name or not data.name.strip() or not data.type:
        raise InvalidArgumentError("Name and type required")
    try:
        conversation_type = ConversationType(data.type)
    except ValueError:
        raise InvalidArgumentError(f"Unknown conversation type: {data.type}") from None

    creator_id = principal.subject_id
    member_ids: list[int] = []
    for member_id in data.member_ids:
        if member_id != creator_id and member_id not in member_ids:
            member_ids.append(member_id)

    if conversation_type == ConversationType.DIRECT:
        if len(member_ids) != 1:
            raise InvalidArgumentError("A direct conversation needs exactly one other member")
        other_id = member_ids[0]
        conversation, _created = await get_or_create_direct_conversation(
            principal, other_id, uow,
        )
        profile = (await uow.users.get_profiles([other_id])).get(other_id)
        return ConversationSummary(
            id=conversation.id,
            type=conversation.type,
            name=profile.name if profile else None,
            last_message=None,
            last_message_at=None,
            unread=0,
            members=sorted([creator_id, other_id]),
            avatar=profile.avatar_url if profile else None,
            email=profile.email if profile else None,
            other_user_id=other_id,
        )

    now = datetime.now(timezone.utc)
    async with uow:
        conversation = await uow.conversations_w.create(
            Conversation(
                id=uuid.uuid4(),
                type=conversation_type,
                name=data.name.strip(),
                direct_key=None,
                created_at=now,
                updated_at=now,
            )
        )
        await uow.memberships_w.add(
            Membership(conversation_id=conversation.id, user_id=creator_id, is_admin=True, joined_at=now)
        )
        for member_id in member_ids:
            await uow.memberships_w.add(
                Membership(conversation_id=conversation.id, user_id=member_id, is_admin=False, joined_at=now)
            )

        notice = _system_message(conversation.id, f"New {conversation_type} created", now)
        await uow.messages_w.create_if_not_exists(notice)
        await uow.commit()

    logger.info(
        "User %s created %s conversation %s with %d members",
        creator_id, conversation_type, conversation.id, len(member_ids) + 1,
    )
    return ConversationSummary(
        id=conversation.id,
        type=conversation.type,
        name=conversation.name,
        last_message=notice.body,
        last_message_at=notice.created_at,
        unread=0,
        members=[creator_id, *member_ids],
    )


async def add_member(
    conversation_id: uuid.UUID,
    principal: Principal,
    user_id: int,
    uow: UnitOfWork,
) -> Membership:
    """Add a colleague to a group conversation. Only group admins may do this."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    await assert_conversation_admin(principal.subject_id, conversation, uow.memberships)
    assert conversation is not None

    if conversation.is_direct:
        raise InvalidArgumentError("Members of a direct conversation are fixed")
    if await uow.memberships.is_member(conversation_id, user_id):
        raise ConflictError("User is already a member")
    if not await uow.users.exists(user_id):
        raise NotFoundError("User not found")

    now = datetime.now(timezone.utc)
    membership = Membership(
        conversation_id=conversation_id,
        user_id=user_id,
        is_admin=False,
        joined_at=now,
    )
    async with uow:
        await uow.memberships_w.add(membership)
        await uow.messages_w.create_if_not_exists(
            _system_message(conversation_id, f"User {user_id} was added", now),
        )
        await uow.commit()

    logger.info("User %s added %s to %s", principal.subject_id, user_id, conversation_id)
    return membership


def _system_message(conversation_id: uuid.UUID, body: str, ts: datetime) -> Message:
    # System notices carry no sender and never raise unread badges
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=None,
        type=MessageType.SYSTEM,
        body=body,
        attachment_url=None,
        attachment_type=None,
        attachment_name=None,
        is_read=True,
        client_msg_id=None,
        created_at=ts,
    )
