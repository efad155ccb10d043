from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class AttachmentResponse(BaseModel):
    url: str
    type: str
    name: str | None = None

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: int | None
    text: str | None
    attachment: AttachmentResponse | None
    is_read: bool
    is_me: bool
    is_system: bool
    sender_name: str | None
    sender_avatar: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
