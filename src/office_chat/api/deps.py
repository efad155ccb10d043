"""FastAPI dependency injection helpers."""
from __future__ import annotations

import logging
from typing import Annotated, AsyncIterator

from fastapi import Depends, Request, WebSocket
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from office_chat.application.dto.principal import Principal
from office_chat.application.exceptions import UnauthenticatedError
from office_chat.application.ports.auth import TokenVerifier
from office_chat.config import settings
from office_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from office_chat.infrastructure.auth.jwks_verifier import JWKSVerifier
from office_chat.infrastructure.db.session import AsyncSessionLocal
from office_chat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


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


async def authenticate(token: str | None) -> Principal:
    """Resolve a raw token to a principal or raise UnauthenticatedError."""
    if not token:
        raise UnauthenticatedError("Not authenticated")
    try:
        return await get_verifier().verify(token)
    except Exception as exc:
        logger.debug("Token rejected", exc_info=True)
        raise UnauthenticatedError(str(exc) or "Invalid token") from exc


def token_from_websocket(websocket: WebSocket) -> str | None:
    """Token passed as ``?token=`` or in the auth cookie."""
    return websocket.query_params.get("token") or websocket.cookies.get(settings.AUTH_COOKIE_NAME)


async def get_current_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> Principal:
    token = credentials.credentials if credentials else request.cookies.get(settings.AUTH_COOKIE_NAME)
    return await authenticate(token)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
