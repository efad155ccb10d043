from __future__ import annotations

import logging
import uuid

from office_chat.application.dto.principal import Principal
from office_chat.application.exceptions import InvalidArgumentError
from office_chat.application.policies.permissions import assert_conversation_access
from office_chat.application.uow import UnitOfWork

logger = logging.getLogger(__name__)


async def mark_read(
    conversation_id: uuid.UUID | None,
    principal: Principal,
    uow: UnitOfWork,
) -> int:
    """Flag every unread message from other senders as read. Idempotent.

    Returns the number of messages that changed state.
    """
    if conversation_id is None:
        raise InvalidArgumentError("Conversation ID required")

    conversation = await uow.conversations.get_by_id(conversation_id)
    await assert_conversation_access(principal.subject_id, conversation, uow.memberships)

    async with uow:
        updated = await uow.messages_w.mark_read(conversation_id, principal.subject_id)
        await uow.commit()

    if updated:
        logger.debug(
            "User %s read %d messages in %s", principal.subject_id, updated, conversation_id,
        )
    return updated
