from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from office_chat.api.deps import CurrentPrincipal, UoWDep
from office_chat.api.v1.schemas.message import MessageResponse
from office_chat.services import message_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["messages"])


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.list_messages(conversation_id, principal, uow)
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]
