"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dynidp.api.routers import external_login, providers
from dynidp.auth.cache import OptionsCache
from dynidp.auth.schemes import COOKIE_HANDLER, AuthenticationScheme, AuthenticationSchemeProvider
from dynidp.core.config import get_settings
from dynidp.core.database import close_engine, get_engine
from dynidp.core.logging import configure_logging, get_logger

logger = get_logger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    configure_logging()
    settings = get_settings()
    logger.info("Starting dynidp", debug=settings.app_debug)

    # Warm up DB connection pool
    get_engine()
    logger.info("Authentication schemes ready", schemes=app.state.scheme_provider.names())

    yield

    await close_engine()
    logger.info("dynidp stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="dynidp",
        description="Identity provider with runtime-managed OIDC and SAML providers",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Process-scoped collaborators, injected into requests via dependencies
    app.state.options_cache = OptionsCache()
    app.state.scheme_provider = AuthenticationSchemeProvider(
        [AuthenticationScheme(name=settings.local_session_scheme, handler=COOKIE_HANDLER)]
    )
    app.state.http_client_factory = httpx.AsyncClient

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(providers.router)
    app.include_router(external_login.router)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": VERSION}

    return app


app = create_app()
