from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from office_chat.domain.entities.user import UserProfile
from office_chat.infrastructure.db.mappers import user as mapper
from office_chat.infrastructure.db.models.user import UserModel

ACTIVE_STATUS = "Active"


class UserDirectoryRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_profiles(self, user_ids: Iterable[int]) -> dict[int, UserProfile]:
        ids = set(user_ids)
        if not ids:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(ids))
        result = await self._session.execute(stmt)
        return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}

    async def exists(self, user_id: int) -> bool:
        stmt = select(UserModel.id).where(UserModel.id == user_id).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def list_active(self, *, exclude_id: int) -> list[UserProfile]:
        stmt = (
            select(UserModel)
            .where(
                UserModel.status == ACTIVE_STATUS,
                UserModel.id != exclude_id,
                func.coalesce(UserModel.name, "") != "",
            )
            .order_by(UserModel.name)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]
