"""Push-channel room names.

Every connection joins its owner's personal room on connect; conversation
rooms are joined explicitly while a client is viewing that conversation.
"""
from __future__ import annotations

from uuid import UUID


def personal_room(user_id: int) -> str:
    return f"user:{user_id}"


def conversation_room(conversation_id: UUID) -> str:
    return f"conversation:{conversation_id}"
