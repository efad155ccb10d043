from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.selectable import ScalarSelect

from office_chat.application.dto.conversation import ConversationSummary
from office_chat.application.exceptions import InternalError
from office_chat.domain.entities.conversation import Conversation
from office_chat.domain.value_objects.enums import ConversationType
from office_chat.infrastructure.db.mappers import conversation as mapper
from office_chat.infrastructure.db.models.conversation import ConversationModel
from office_chat.infrastructure.db.models.membership import MembershipModel
from office_chat.infrastructure.db.models.message import MessageModel


def _latest_message_column(column: Any) -> ScalarSelect[Any]:
    return (
        select(column)
        .where(MessageModel.conversation_id == ConversationModel.id)
        .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
        .limit(1)
        .correlate(ConversationModel)
        .scalar_subquery()
    )


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None

    async def get_direct_by_key(self, direct_key: str) -> Conversation | None:
        stmt = select(ConversationModel).where(
            ConversationModel.type == ConversationType.DIRECT,
            ConversationModel.direct_key == direct_key,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_summaries_for_user(self, user_id: int) -> list[ConversationSummary]:
        last_message = _latest_message_column(MessageModel.body)
        last_message_at = _latest_message_column(MessageModel.created_at)
        unread = (
            select(func.count(MessageModel.id))
            .where(
                MessageModel.conversation_id == ConversationModel.id,
                MessageModel.sender_id.is_distinct_from(user_id),
                MessageModel.is_read.is_(False),
            )
            .correlate(ConversationModel)
            .scalar_subquery()
        )
        mine = select(MembershipModel.conversation_id).where(
            MembershipModel.user_id == user_id,
        )

        stmt = (
            select(
                ConversationModel.id,
                ConversationModel.type,
                ConversationModel.name,
                last_message.label("last_message"),
                last_message_at.label("last_message_at"),
                unread.label("unread"),
                func.array_agg(MembershipModel.user_id).label("members"),
            )
            .join(MembershipModel, MembershipModel.conversation_id == ConversationModel.id)
            .where(ConversationModel.id.in_(mine))
            .group_by(ConversationModel.id)
            .order_by(last_message_at.desc().nullslast(), ConversationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [
            ConversationSummary(
                id=row.id,
                type=row.type,
                name=row.name,
                last_message=row.last_message,
                last_message_at=row.last_message_at,
                unread=row.unread or 0,
                members=sorted(row.members or []),
            )
            for row in result.all()
        ]


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, conversation: Conversation) -> Conversation:
        model = mapper.entity_to_model(conversation)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def create_direct_if_not_exists(
        self,
        conversation: Conversation,
    ) -> tuple[Conversation, bool]:
        """Insert a direct conversation, racing callers converge on one row."""
        assert conversation.direct_key is not None
        stmt = (
            pg_insert(ConversationModel)
            .values(
                id=conversation.id,
                type=conversation.type,
                name=conversation.name,
                direct_key=conversation.direct_key,
                created_at=conversation.created_at,
                updated_at=conversation.updated_at,
            )
            .on_conflict_do_nothing(constraint="uq_conversation_direct_pair")
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.model_to_entity(row), True

        # Conflict: another transaction committed the pair first
        existing = await ConversationReaderRepo(self._session).get_direct_by_key(
            conversation.direct_key,
        )
        if existing is None:
            raise InternalError("Direct conversation vanished after insert conflict")
        return existing, False
