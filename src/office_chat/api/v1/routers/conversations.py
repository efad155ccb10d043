from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from office_chat.api.deps import CurrentPrincipal, UoWDep
from office_chat.api.v1.schemas.conversation import (
    AddMemberRequest,
    ConversationSummaryResponse,
    CreateConversationRequest,
    DirectConversationRequest,
    DirectConversationResponse,
    MarkReadRequest,
    MarkReadResponse,
    MembershipResponse,
)
from office_chat.application.dto.conversation import CreateConversationDTO
from office_chat.services import conversation_service, read_state_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationSummaryResponse]:
    summaries = await conversation_service.list_conversations(principal, uow)
    return [ConversationSummaryResponse.model_validate(s, from_attributes=True) for s in summaries]


@router.post("", response_model=ConversationSummaryResponse, status_code=201)
async def create_conversation(
    body: CreateConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationSummaryResponse:
    summary = await conversation_service.create_conversation(
        principal,
        CreateConversationDTO(name=body.name, type=body.type, member_ids=body.members),
        uow,
    )
    return ConversationSummaryResponse.model_validate(summary, from_attributes=True)


@router.post("/direct", response_model=DirectConversationResponse)
async def get_or_create_direct_conversation(
    body: DirectConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> DirectConversationResponse:
    conv, created = await conversation_service.get_or_create_direct_conversation(
        principal, body.target_user_id, uow,
    )
    return DirectConversationResponse(conversation_id=conv.id, created=created)


@router.post("/mark-read", response_model=MarkReadResponse)
async def mark_read(
    body: MarkReadRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    updated = await read_state_service.mark_read(body.conversation_id, principal, uow)
    return MarkReadResponse(success=True, updated=updated)


@router.post("/{conversation_id}/members", response_model=MembershipResponse, status_code=201)
async def add_member(
    conversation_id: UUID,
    body: AddMemberRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MembershipResponse:
    membership = await conversation_service.add_member(
        conversation_id, principal, body.user_id, uow,
    )
    return MembershipResponse.model_validate(membership, from_attributes=True)
