from __future__ import annotations

from fastapi import APIRouter

from office_chat.api.deps import CurrentPrincipal, UoWDep
from office_chat.api.v1.schemas.user import UserResponse
from office_chat.services import user_service

router = APIRouter(prefix="/api/v1/chat/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[UserResponse]:
    colleagues = await user_service.list_colleagues(principal, uow)
    return [
        UserResponse(id=u.id, name=u.name, role=u.role, avatar=u.avatar_url)
        for u in colleagues
    ]
