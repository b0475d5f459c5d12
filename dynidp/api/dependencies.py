"""FastAPI dependency providers."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dynidp.auth.cache import OptionsCache
from dynidp.auth.challenge import ChallengeOrchestrator
from dynidp.auth.oidc import OpenIdConnectHandler
from dynidp.auth.resolver import SchemeResolver
from dynidp.auth.schemes import AuthenticationSchemeProvider
from dynidp.core.auth import decode_access_token
from dynidp.core.database import get_session_factory
from dynidp.services.provider_registry import ProviderRegistryService

bearer_scheme = HTTPBearer(auto_error=False)


def get_db_session_factory() -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


async def get_db(
    factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for the duration of a request."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_options_cache(request: Request) -> OptionsCache:
    """The process-wide cache created by the application factory."""
    return request.app.state.options_cache


def get_scheme_provider(request: Request) -> AuthenticationSchemeProvider:
    return request.app.state.scheme_provider


def get_registry_service(
    db: AsyncSession = Depends(get_db),
    cache: OptionsCache = Depends(get_options_cache),
) -> ProviderRegistryService:
    return ProviderRegistryService(db, cache)


def get_scheme_resolver(
    factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),
) -> SchemeResolver:
    return SchemeResolver(factory)


def get_oidc_handler(
    request: Request,
    resolver: SchemeResolver = Depends(get_scheme_resolver),
    cache: OptionsCache = Depends(get_options_cache),
) -> OpenIdConnectHandler:
    return OpenIdConnectHandler(
        cache, resolver, http_client_factory=request.app.state.http_client_factory
    )


def get_challenge_orchestrator(
    schemes: AuthenticationSchemeProvider = Depends(get_scheme_provider),
    resolver: SchemeResolver = Depends(get_scheme_resolver),
    handler: OpenIdConnectHandler = Depends(get_oidc_handler),
) -> ChallengeOrchestrator:
    return ChallengeOrchestrator(schemes, resolver, handler)


async def require_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> dict:
    """Validate the bearer JWT and return its claims; 403 unless role=admin."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    claims = decode_access_token(credentials.credentials)
    if claims.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return claims
