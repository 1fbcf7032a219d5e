"""FastAPI dependency injection helpers."""
from __future__ import annotations

import logging
from typing import Annotated, AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import UnauthorizedError
from messaging_service.application.ports.auth import TokenVerifier
from messaging_service.application.ports.bus import EventPublisher
from messaging_service.application.uow import UnitOfWork
from messaging_service.config import settings
from messaging_service.infrastructure.auth.hs256_verifier import HS256Verifier
from messaging_service.infrastructure.auth.jwks_verifier import JWKSVerifier
from messaging_service.infrastructure.bus.redis_pubsub import RedisPubSubPublisher
from messaging_service.infrastructure.db.session import AsyncSessionLocal
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_uow() -> AsyncIterator[UnitOfWork]:
    """One session per request; uncommitted work is rolled back on error."""
    async with AsyncSessionLocal() as session, SqlAlchemyUoW(session) as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def get_publisher(request: Request) -> EventPublisher | None:
    redis = getattr(request.app.state, "redis", None)
    if redis is None:
        return None
    return RedisPubSubPublisher(redis, settings.REDIS_PUBSUB_CHANNEL)


PublisherDep = Annotated[EventPublisher | None, Depends(get_publisher)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    uow: UoWDep,
) -> Principal:
    """Resolve the bearer token to a principal whose account is still active."""
    if credentials is None:
        raise UnauthorizedError("Unauthorized")

    verifier = get_verifier()
    try:
        principal = await verifier.verify(credentials.credentials)
    except Exception as exc:
        logger.info("Token rejected: %s", exc)
        raise UnauthorizedError("Unauthorized") from exc

    user = await uow.users.get_by_id(principal.user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("Unauthorized")
    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
