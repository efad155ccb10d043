"""Outbound push events and their payloads."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from office_chat.domain.entities.message import Message

USER_ONLINE = "user_online"
USER_OFFLINE = "user_offline"
ONLINE_USERS = "online_users"
RECEIVE_MESSAGE = "receive_message"
MESSAGE_ACK = "message_ack"
MESSAGE_NACK = "message_nack"
ERROR = "error"
PONG = "pong"


@dataclass(frozen=True, slots=True)
class PresenceEvent:
    user_id: int


@dataclass(frozen=True, slots=True)
class OnlineUsersEvent:
    user_ids: list[int]


@dataclass(frozen=True, slots=True)
class AttachmentPayload:
    url: str
    type: str | None
    name: str | None = None


@dataclass(frozen=True, slots=True)
class MessageEvent:
    id: UUID
    conversation_id: UUID
    sender_id: int | None
    text: str | None
    attachment: AttachmentPayload | None
    is_read: bool
    is_system: bool
    client_msg_id: UUID | None
    created_at: datetime

    @classmethod
    def from_message(cls, msg: Message) -> MessageEvent:
        attachment = (
            AttachmentPayload(
                url=msg.attachment_url,
                type=msg.attachment_type,
                name=msg.attachment_name,
            )
            if msg.attachment_url
            else None
        )
        return cls(
            id=msg.id,
            conversation_id=msg.conversation_id,
            sender_id=msg.sender_id,
            text=msg.body,
            attachment=attachment,
            is_read=msg.is_read,
            is_system=msg.is_system,
            client_msg_id=msg.client_msg_id,
            created_at=msg.created_at,
        )


@dataclass(frozen=True, slots=True)
class MessageAckEvent:
    conversation_id: UUID
    message_id: UUID
    client_msg_id: UUID | None
    created: bool


@dataclass(frozen=True, slots=True)
class MessageNackEvent:
    conversation_id: UUID
    client_msg_id: UUID | None
    code: str
    detail: str


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    code: str
    detail: str = ""


def event_data(event: Any) -> dict[str, Any]:
    """Payload dict for a push envelope."""
    return asdict(event)
