"""WebSocket message envelope and per-event payload models."""
from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator

from office_chat.application.dto.message import AttachmentDTO, SendMessageDTO


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # join_chat | leave_chat | send_message | ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # receive_message | user_online | user_offline | online_users | ...
    data: dict[str, Any] = {}


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class PingPayload(_Payload):
    pass


class JoinChatPayload(_Payload):
    conversation_id: UUID


class LeaveChatPayload(_Payload):
    conversation_id: UUID


class AttachmentIn(_Payload):
    url: str
    type: str
    name: str | None = None


class SendMessagePayload(_Payload):
    conversation_id: UUID
    text: str | None = None
    attachment: AttachmentIn | None = None
    client_msg_id: UUID | None = None

    @model_validator(mode="after")
    def _require_content(self) -> SendMessagePayload:
        if not (self.text and self.text.strip()) and self.attachment is None:
            raise ValueError("text or attachment is required")
        return self

    def to_dto(self) -> SendMessageDTO:
        attachment = (
            AttachmentDTO(url=self.attachment.url, type=self.attachment.type, name=self.attachment.name)
            if self.attachment
            else None
        )
        return SendMessageDTO(
            conversation_id=self.conversation_id,
            text=self.text,
            attachment=attachment,
            client_msg_id=self.client_msg_id,
        )


INBOUND_PAYLOADS: dict[str, type[_Payload]] = {
    "ping": PingPayload,
    "join_chat": JoinChatPayload,
    "leave_chat": LeaveChatPayload,
    "send_message": SendMessagePayload,
}


class UnknownEventError(ValueError):
    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(f"Unknown event type: {event_type}")


def parse_inbound(raw: str) -> tuple[str, _Payload]:
    """Validate an inbound frame into its event name and typed payload.

    Raises pydantic.ValidationError for malformed frames and
    UnknownEventError for event names this server does not handle.
    """
    envelope = WsInbound.model_validate_json(raw)
    payload_cls = INBOUND_PAYLOADS.get(envelope.type)
    if payload_cls is None:
        raise UnknownEventError(envelope.type)
    return envelope.type, payload_cls.model_validate(envelope.data)
