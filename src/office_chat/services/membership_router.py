from __future__ import annotations

import logging
import uuid

from office_chat.application.ports.push import ConnectionHandle, PushChannel
from office_chat.application.uow import UnitOfWork
from office_chat.domain.value_objects.rooms import conversation_room

logger = logging.getLogger(__name__)


class MembershipRouter:
    """Maps conversations to their members and to the connections viewing them."""

    def __init__(self, push: PushChannel) -> None:
        self._push = push

    async def resolve_recipients(
        self,
        conversation_id: uuid.UUID,
        uow: UnitOfWork,
    ) -> list[int]:
        """Every member of the conversation, connected or not."""
        return await uow.memberships.list_member_ids(conversation_id)

    def is_anyone_else_present(self, conversation_id: uuid.UUID, sender_id: int) -> bool:
        """True if a user other than ``sender_id`` is viewing the conversation.

        This is the read-on-send heuristic: a message counts as seen when a
        counterpart has the conversation room joined at send time.
        """
        viewers = self._push.user_ids_in_room(conversation_room(conversation_id))
        return any(uid != sender_id for uid in viewers)

    def join(self, connection: ConnectionHandle, conversation_id: uuid.UUID) -> None:
        self._push.join(connection, conversation_room(conversation_id))
        logger.debug("User %s joined conversation %s", connection.user_id, conversation_id)

    def leave(self, connection: ConnectionHandle, conversation_id: uuid.UUID) -> None:
        self._push.leave(connection, conversation_room(conversation_id))
        logger.debug("User %s left conversation %s", connection.user_id, conversation_id)
