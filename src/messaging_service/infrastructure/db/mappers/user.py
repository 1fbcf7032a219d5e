from __future__ import annotations

from messaging_service.domain.entities.user import User
from messaging_service.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        username=model.username,
        profile_photo_url=model.profile_photo_url,
        is_online=model.is_online,
        last_seen_at=model.last_seen_at,
        deactivated_at=model.deactivated_at,
    )
