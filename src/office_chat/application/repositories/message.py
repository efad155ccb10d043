from __future__ import annotations

from typing import Protocol
from uuid import UUID

from office_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        """All messages of a conversation, oldest first."""
        ...


class MessageWriter(Protocol):
    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message. Return (message, created). If conflict on client_msg_id → return existing."""
        ...

    async def get_by_client_msg_id(
        self,
        conversation_id: UUID,
        sender_id: int,
        client_msg_id: UUID,
    ) -> Message | None: ...

    async def mark_read(self, conversation_id: UUID, reader_id: int) -> int:
        """Flag unread messages not sent by ``reader_id`` as read. Returns rows changed."""
        ...
