from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    """One row of a user's conversation list."""

    id: UUID
    type: str
    name: str | None
    last_message: str | None
    last_message_at: datetime | None
    unread: int
    members: list[int] = field(default_factory=list)
    avatar: str | None = None
    email: str | None = None
    other_user_id: int | None = None


@dataclass(frozen=True, slots=True)
class CreateConversationDTO:
    name: str | None
    type: str | None
    member_ids: list[int] = field(default_factory=list)
