from __future__ import annotations

from typing import Any

from office_chat.domain.entities.message import Message
from office_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        type=model.type,
        body=model.body,
        attachment_url=model.attachment_url,
        attachment_type=model.attachment_type,
        attachment_name=model.attachment_name,
        is_read=model.is_read,
        client_msg_id=model.client_msg_id,
        created_at=model.created_at,
    )


def entity_to_values(entity: Message) -> dict[str, Any]:
    """Column values for a Core INSERT of ``entity``."""
    return {
        "id": entity.id,
        "conversation_id": entity.conversation_id,
        "sender_id": entity.sender_id,
        "type": entity.type,
        "body": entity.body,
        "attachment_url": entity.attachment_url,
        "attachment_type": entity.attachment_type,
        "attachment_name": entity.attachment_name,
        "is_read": entity.is_read,
        "client_msg_id": entity.client_msg_id,
        "created_at": entity.created_at,
    }
