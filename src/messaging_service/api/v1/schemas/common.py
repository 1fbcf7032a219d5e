from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from messaging_service.domain.entities.user import User


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    success: bool = False
    message: str


class StatusResponse(CamelModel):
    success: bool = True
    message: str


class UserPublic(CamelModel):
    id: str
    username: str
    profile_photo_url: str | None
    is_online: bool
    last_seen_at: datetime | None

    @classmethod
    def from_entity(cls, user: User) -> UserPublic:
        return cls.model_validate(user)


class UserBrief(CamelModel):
    id: str
    username: str
    profile_photo_url: str | None

    @classmethod
    def from_entity(cls, user: User | None) -> UserBrief | None:
        return cls.model_validate(user) if user is not None else None


class UserName(CamelModel):
    id: str
    username: str

    @classmethod
    def from_entity(cls, user: User | None) -> UserName | None:
        return cls.model_validate(user) if user is not None else None
