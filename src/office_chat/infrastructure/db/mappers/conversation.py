from __future__ import annotations

from office_chat.domain.entities.conversation import Conversation
from office_chat.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        type=model.type,
        name=model.name,
        direct_key=model.direct_key,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        type=entity.type,
        name=entity.name,
        direct_key=entity.direct_key,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
