from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class User:
    """Public profile of a user. Owned by the accounts service, read-only here."""

    id: str
    username: str
    profile_photo_url: str | None
    is_online: bool
    last_seen_at: datetime | None
    deactivated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.deactivated_at is None
