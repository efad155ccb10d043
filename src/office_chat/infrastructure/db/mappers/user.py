from __future__ import annotations

from office_chat.domain.entities.user import UserProfile
from office_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> UserProfile:
    return UserProfile(
        id=model.id,
        name=model.name or "",
        email=model.email,
        avatar_url=model.avatar_url,
        role=model.designation or model.role,
    )
