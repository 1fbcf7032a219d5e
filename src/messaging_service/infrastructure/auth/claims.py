from __future__ import annotations

from typing import Any

import jwt

from messaging_service.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from decoded JWT claims.

    Tokens issued by the accounts service carry ``userId``; standard ``sub``
    is accepted as well.
    """
    user_id = payload.get("userId") or payload.get("sub")
    if not user_id:
        raise jwt.InvalidTokenError("Token has no subject")
    return Principal(
        user_id=str(user_id),
        username=payload.get("username"),
        email=payload.get("email"),
        role=payload.get("role", "user"),
    )
