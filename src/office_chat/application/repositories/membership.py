from __future__ import annotations

from typing import Protocol
from uuid import UUID

from office_chat.domain.entities.membership import Membership


class MembershipReader(Protocol):
    async def is_member(self, conversation_id: UUID, user_id: int) -> bool: ...

    async def get(self, conversation_id: UUID, user_id: int) -> Membership | None: ...

    async def list_member_ids(self, conversation_id: UUID) -> list[int]: ...


class MembershipWriter(Protocol):
    async def add(self, membership: Membership) -> None:
        """Raises ConflictError if the user is already a member."""
        ...
