from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from office_chat.domain.value_objects.enums import MessageType


@dataclass(frozen=True, slots=True)
class Message:
    """A persisted chat message.

    ``sender_id`` is ``None`` for system messages. Only ``is_read`` ever
    changes after insertion, and only from ``False`` to ``True``.
    """

    id: UUID
    conversation_id: UUID
    sender_id: int | None
    type: str
    body: str | None
    attachment_url: str | None
    attachment_type: str | None
    attachment_name: str | None
    is_read: bool
    client_msg_id: UUID | None
    created_at: datetime

    @property
    def is_system(self) -> bool:
        return self.sender_id is None or self.type == MessageType.SYSTEM
