from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from office_chat.application.exceptions import ConflictError
from office_chat.domain.entities.membership import Membership
from office_chat.infrastructure.db.mappers import membership as mapper
from office_chat.infrastructure.db.models.membership import MembershipModel


class MembershipReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def is_member(self, conversation_id: UUID, user_id: int) -> bool:
        stmt = (
            select(MembershipModel.id)
            .where(
                MembershipModel.conversation_id == conversation_id,
                MembershipModel.user_id == user_id,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get(self, conversation_id: UUID, user_id: int) -> Membership | None:
        stmt = select(MembershipModel).where(
            MembershipModel.conversation_id == conversation_id,
            MembershipModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_member_ids(self, conversation_id: UUID) -> list[int]:
        stmt = (
            select(MembershipModel.user_id)
            .where(MembershipModel.conversation_id == conversation_id)
            .order_by(MembershipModel.user_id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class MembershipWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, membership: Membership) -> None:
        """Insert a membership; a duplicate (conversation, user) raises ConflictError."""
        model = mapper.entity_to_model(membership)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError("User is already a member") from exc
