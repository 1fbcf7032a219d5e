from __future__ import annotations

from typing import Protocol

from messaging_service.application.dto.principal import Principal


class TokenVerifier(Protocol):
    """Turns a bearer token into a principal.

    Implementations raise ``jwt.InvalidTokenError`` (or a subclass) for a bad
    signature, an expired token or missing subject claims. Whether the
    account still exists is checked by the caller.
    """

    async def verify(self, token: str) -> Principal: ...
