"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from chat_hub.application.dto.principal import Principal
from chat_hub.application.ports.auth import TokenVerifier
from chat_hub.application.uow import UnitOfWork
from chat_hub.config import settings
from chat_hub.infrastructure.auth.hs256_verifier import HS256Verifier
from chat_hub.infrastructure.auth.jwks_verifier import JWKSVerifier
from chat_hub.infrastructure.ws.hub import Hub
from chat_hub.services.message_router import MessageRouter

_bearer_scheme = HTTPBearer()


async def get_uow(conn: HTTPConnection) -> AsyncIterator[UnitOfWork]:
    async with conn.app.state.uow_factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def get_hub(conn: HTTPConnection) -> Hub:
    return conn.app.state.hub


HubDep = Annotated[Hub, Depends(get_hub)]


def get_router(conn: HTTPConnection) -> MessageRouter:
    return conn.app.state.message_router


RouterDep = Annotated[MessageRouter, Depends(get_router)]


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
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
