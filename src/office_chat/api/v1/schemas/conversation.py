from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ConversationSummaryResponse(BaseModel):
    id: UUID
    type: str
    name: str | None
    last_message: str | None
    last_message_at: datetime | None
    unread: int
    members: list[int]
    avatar: str | None = None
    email: str | None = None
    other_user_id: int | None = None

    model_config = {"from_attributes": True}


class DirectConversationRequest(BaseModel):
    target_user_id: int | None = None


class DirectConversationResponse(BaseModel):
    conversation_id: UUID
    created: bool


class CreateConversationRequest(BaseModel):
    # presence of name/type is checked by the service so it can answer 400
    name: str | None = None
    type: str | None = None
    members: list[int] = []


class MarkReadRequest(BaseModel):
    conversation_id: UUID | None = None


class MarkReadResponse(BaseModel):
    success: bool
    updated: int


class AddMemberRequest(BaseModel):
    user_id: int


class MembershipResponse(BaseModel):
    conversation_id: UUID
    user_id: int
    is_admin: bool
    joined_at: datetime

    model_config = {"from_attributes": True}
