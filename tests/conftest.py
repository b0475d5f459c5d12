"""pytest fixtures shared across all tests."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from dynidp.auth.cache import OptionsCache
from dynidp.auth.resolver import SchemeResolver
from dynidp.core.config import Settings
from dynidp.models.base import Base
from dynidp.services.provider_registry import ProviderRegistryService

_FAKE_ADMIN = {"sub": "testadmin", "role": "admin"}


def discovery_handler(request: httpx.Request) -> httpx.Response:
    """Serve a discovery document for any host, pointing back at that host."""
    if not request.url.path.endswith("/.well-known/openid-configuration"):
        return httpx.Response(404)
    issuer = f"https://{request.url.host}"
    return httpx.Response(
        200,
        json={
            "issuer": issuer,
            "authorization_endpoint": f"{issuer}/connect/authorize",
            "token_endpoint": f"{issuer}/connect/token",
            "jwks_uri": f"{issuer}/.well-known/jwks",
        },
    )


def mock_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(discovery_handler))


@pytest.fixture
def settings() -> Settings:
    return Settings(app_debug=True, public_base_url="https://idp.test")


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database file per test.

    A file (not :memory:) so that the resolver's own sessions see rows
    committed by the registry through separate connections.
    """
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Yield an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def options_cache() -> OptionsCache:
    return OptionsCache()


@pytest.fixture
def registry(db_session, options_cache) -> ProviderRegistryService:
    return ProviderRegistryService(db_session, options_cache)


@pytest.fixture
def resolver(session_factory, settings) -> SchemeResolver:
    return SchemeResolver(session_factory, settings)


@pytest.fixture
def app(session_factory):
    """FastAPI app wired to the test DB, with admin auth bypassed."""
    from dynidp.api.app import create_app
    from dynidp.api.dependencies import get_db_session_factory, require_admin

    application = create_app()
    application.state.http_client_factory = mock_http_client

    async def override_auth():
        return _FAKE_ADMIN

    application.dependency_overrides[get_db_session_factory] = lambda: session_factory
    application.dependency_overrides[require_admin] = override_auth
    return application


@pytest_asyncio.fixture
async def client(app):
    """HTTPX async test client wired to the FastAPI app."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


def _oidc_payload(**overrides) -> dict:
    payload = {
        "scheme": "s1",
        "display_name": "Scheme One",
        "enabled": True,
        "authority": "https://login.one.example",
        "client_id": "client-one",
        "client_secret": "secret-one",
        "scopes": "openid profile email",
    }
    payload.update(overrides)
    return payload


def _saml_payload(**overrides) -> dict:
    payload = {
        "scheme": "saml1",
        "display_name": "SAML One",
        "enabled": True,
        "sp_entity_id": "https://idp.test",
        "idp_entity_id": "https://saml.example",
        "idp_single_sign_on_url": "https://saml.example/sso",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def oidc_payload():
    """Factory for a valid OIDC provider body; keyword overrides win."""
    return _oidc_payload


@pytest.fixture
def saml_payload():
    """Factory for a valid SAML provider body; keyword overrides win."""
    return _saml_payload


@pytest.fixture
def http_client_factory():
    """httpx client factory answering OIDC discovery requests locally."""
    return mock_http_client
