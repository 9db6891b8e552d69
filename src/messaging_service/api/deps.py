"""FastAPI dependency injection helpers."""
from __future__ import annotations

import logging
from typing import Annotated, AsyncIterator

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from messaging_service.application.dto.principal import Principal
from messaging_service.application.ports.auth import TokenVerifier
from messaging_service.config import settings
from messaging_service.infrastructure.auth.hs256_verifier import HS256Verifier
from messaging_service.infrastructure.auth.jwks_verifier import JWKSVerifier
from messaging_service.infrastructure.db.session import AsyncSessionLocal
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer()


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session, SqlAlchemyUoW(session) as uow:
        yield uow


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


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
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> Principal:
    try:
        return await verifier.verify(credentials.credentials)
    except (jwt.PyJWTError, ValueError) as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def get_current_admin(principal: CurrentPrincipal) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return principal


CurrentAdmin = Annotated[Principal, Depends(get_current_admin)]
