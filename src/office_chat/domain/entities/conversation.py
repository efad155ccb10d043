from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from office_chat.domain.value_objects.enums import ConversationType


def direct_pair_key(user_a: int, user_b: int) -> str:
    """Order-independent key identifying the direct conversation of a pair."""
    low, high = sorted((user_a, user_b))
    return f"{low}:{high}"


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    type: str
    name: str | None
    direct_key: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_direct(self) -> bool:
        return self.type == ConversationType.DIRECT
