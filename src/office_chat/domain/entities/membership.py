from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Membership:
    conversation_id: UUID
    user_id: int
    is_admin: bool
    joined_at: datetime
