from __future__ import annotations

from office_chat.domain.entities.membership import Membership
from office_chat.infrastructure.db.models.membership import MembershipModel


def model_to_entity(model: MembershipModel) -> Membership:
    return Membership(
        conversation_id=model.conversation_id,
        user_id=model.user_id,
        is_admin=model.is_admin,
        joined_at=model.joined_at,
    )


def entity_to_model(entity: Membership) -> MembershipModel:
    return MembershipModel(
        conversation_id=entity.conversation_id,
        user_id=entity.user_id,
        is_admin=entity.is_admin,
        joined_at=entity.joined_at,
    )
