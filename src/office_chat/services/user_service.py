from __future__ import annotations

from office_chat.application.dto.principal import Principal
from office_chat.application.uow import UnitOfWork
from office_chat.domain.entities.user import UserProfile


async def list_colleagues(principal: Principal, uow: UnitOfWork) -> list[UserProfile]:
    """Active colleagues the caller can start a conversation with."""
    return await uow.users.list_active(exclude_id=principal.subject_id)
