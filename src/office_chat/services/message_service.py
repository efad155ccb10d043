from __future__ import annotations

import uuid

from office_chat.application.dto.message import AttachmentDTO, MessageView
from office_chat.application.dto.principal import Principal
from office_chat.application.policies.permissions import assert_conversation_access
from office_chat.application.uow import UnitOfWork
from office_chat.domain.entities.message import Message
from office_chat.domain.entities.user import UserProfile


async def list_messages(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> list[MessageView]:
    """Full history of a conversation, oldest first, from the caller's point of view."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    await assert_conversation_access(principal.subject_id, conversation, uow.memberships)

    messages = await uow.messages.list_messages(conversation_id)
    senders = await uow.users.get_profiles(
        {m.sender_id for m in messages if m.sender_id is not None}
    )
    return [_to_view(m, principal.subject_id, senders) for m in messages]


def _to_view(msg: Message, reader_id: int, senders: dict[int, UserProfile]) -> MessageView:
    sender = senders.get(msg.sender_id) if msg.sender_id is not None else None
    attachment = (
        AttachmentDTO(
            url=msg.attachment_url,
            type=msg.attachment_type or "",
            # unnamed uploads fall back to a generic label
            name=msg.attachment_name or "Attachment",
        )
        if msg.attachment_url
        else None
    )
    return MessageView(
        id=msg.id,
        conversation_id=msg.conversation_id,
        sender_id=msg.sender_id,
        text=msg.body,
        attachment=attachment,
        is_read=msg.is_read,
        is_me=msg.sender_id == reader_id,
        is_system=msg.is_system,
        sender_name=sender.name if sender else None,
        sender_avatar=sender.avatar_url if sender else None,
        created_at=msg.created_at,
    )
