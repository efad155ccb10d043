from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from office_chat.domain.entities.user import UserProfile


class UserDirectory(Protocol):
    async def get_profiles(self, user_ids: Iterable[int]) -> dict[int, UserProfile]: ...

    async def exists(self, user_id: int) -> bool: ...

    async def list_active(self, *, exclude_id: int) -> list[UserProfile]: ...
