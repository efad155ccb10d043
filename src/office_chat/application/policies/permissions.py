from __future__ import annotations

from office_chat.application.exceptions import ForbiddenError, NotFoundError
from office_chat.application.repositories.membership import MembershipReader
from office_chat.domain.entities.conversation import Conversation
from office_chat.domain.entities.membership import Membership


async def assert_conversation_access(
    user_id: int,
    conversation: Conversation | None,
    memberships: MembershipReader,
) -> Conversation:
    """Raise if conversation doesn't exist or the user is not a member."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    is_member = await memberships.is_member(conversation.id, user_id)
    if not is_member:
        raise ForbiddenError("Not a member of this conversation")

    return conversation


async def assert_conversation_admin(
    user_id: int,
    conversation: Conversation | None,
    memberships: MembershipReader,
) -> Membership:
    if conversation is None:
        raise NotFoundError("Conversation not found")

    membership = await memberships.get(conversation.id, user_id)
    if membership is None:
        raise ForbiddenError("Not a member of this conversation")
    if not membership.is_admin:
        raise ForbiddenError("Conversation admin access required")
    return membership
