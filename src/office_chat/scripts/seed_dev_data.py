"""Seed development data: creates tables, sample colleagues and conversations."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.dialects.postgresql import insert as pg_insert

from office_chat.application.dto.conversation import CreateConversationDTO
from office_chat.application.dto.principal import Principal
from office_chat.config import settings
from office_chat.domain.entities.message import Message
from office_chat.domain.value_objects.enums import MessageType
from office_chat.infrastructure.db.base import Base
from office_chat.infrastructure.db.models import UserModel
from office_chat.infrastructure.db.session import AsyncSessionLocal, engine
from office_chat.infrastructure.db.uow import SqlAlchemyUoW
from office_chat.logging_config import configure_logging
from office_chat.services import conversation_service

logger = logging.getLogger(__name__)

USERS = [
    {"id": 1, "name": "Alice Moreau", "email": "alice@example.com", "designation": "Engineering Manager"},
    {"id": 2, "name": "Bruno Silva", "email": "bruno@example.com", "designation": "Backend Developer"},
    {"id": 3, "name": "Chen Wei", "email": "chen@example.com", "designation": "Designer"},
    {"id": 4, "name": "Dana Kowalski", "email": "dana@example.com", "designation": "QA Engineer"},
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await session.execute(
            pg_insert(UserModel)
            .values([{**u, "role": "employee", "status": "Active"} for u in USERS])
            .on_conflict_do_nothing(index_elements=[UserModel.id])
        )
        await session.commit()

        uow = SqlAlchemyUoW(session)
        alice = Principal(subject_id=1)

        direct, created = await conversation_service.get_or_create_direct_conversation(alice, 2, uow)
        if created:
            lines = [
                (1, "Morning! Did the release go out?"),
                (2, "Yes, deployed at 9:40. Monitoring looks clean."),
                (1, "Great, thanks."),
            ]
            async with uow:
                for sender_id, body in lines:
                    await uow.messages_w.create_if_not_exists(
                        Message(
                            id=uuid.uuid4(),
                            conversation_id=direct.id,
                            sender_id=sender_id,
                            type=MessageType.TEXT,
                            body=body,
                            attachment_url=None,
                            attachment_type=None,
                            attachment_name=None,
                            is_read=False,
                            client_msg_id=uuid.uuid4(),
                            created_at=datetime.now(timezone.utc),
                        )
                    )
                await uow.commit()
            logger.info("Seeded direct conversation %s with %d messages", direct.id, len(lines))

        group = await conversation_service.create_conversation(
            alice,
            CreateConversationDTO(name="Platform team", type="group", member_ids=[2, 3, 4]),
            uow,
        )
        logger.info("Seeded group conversation %s", group.id)


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
