from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class AttachmentDTO:
    url: str
    type: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    conversation_id: UUID
    text: str | None = None
    attachment: AttachmentDTO | None = None
    client_msg_id: UUID | None = None


@dataclass(frozen=True, slots=True)
class MessageView:
    """A message as seen by one particular reader."""

    id: UUID
    conversation_id: UUID
    sender_id: int | None
    text: str | None
    attachment: AttachmentDTO | None
    is_read: bool
    is_me: bool
    is_system: bool
    sender_name: str | None
    sender_avatar: str | None
    created_at: datetime
