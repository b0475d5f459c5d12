"""Scheme resolver — turns a stored OIDC provider into live protocol options.

Called lazily by the OIDC handler (through the options cache) the first time a
scheme is used. It never raises: an unknown, disabled or unreadable scheme
yields placeholder options flagged `found=False`, which pass option
validation but point at a non-routable authority.
"""

from __future__ import annotations

from cryptography.fernet import InvalidToken
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dynidp.auth.options import OpenIdConnectOptions, Resolution, parse_scopes
from dynidp.core.config import Settings, get_settings
from dynidp.core.logging import get_logger
from dynidp.models.provider import OidcProvider
from dynidp.services.provider_store import ProviderStore

logger = get_logger(__name__)


class SchemeResolver:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ) -> None:
        # Own short-lived sessions keep resolution reads out of the request transaction
        self._session_factory = session_factory
        self._settings = settings or get_settings()

    async def _find_enabled(self, scheme: str) -> OidcProvider | None:
        async with self._session_factory() as session:
            store = ProviderStore(session, OidcProvider)
            return await store.get_by_scheme(scheme, enabled_only=True)

    async def scheme_exists(self, scheme: str) -> bool:
        """Eager check: is there an enabled OIDC provider for *scheme*?"""
        if not scheme:
            return False
        try:
            return await self._find_enabled(scheme) is not None
        except (SQLAlchemyError, InvalidToken) as exc:
            # InvalidToken: stored secret no longer decrypts under SECRET_KEY
            logger.error("Provider lookup failed", scheme=scheme, error=str(exc))
            return False

    async def resolve(self, scheme: str) -> Resolution:
        try:
            provider = await self._find_enabled(scheme) if scheme else None
        except (SQLAlchemyError, InvalidToken) as exc:
            logger.error("Provider lookup failed, using placeholder", scheme=scheme, error=str(exc))
            provider = None

        if provider is None:
            logger.warning("OIDC provider not found in database", scheme=scheme)
            return Resolution(options=self.placeholder(scheme), found=False)

        logger.info("Configuring OIDC scheme", scheme=scheme, authority=provider.authority)
        return Resolution(options=self.to_options(provider), found=True)

    def to_options(self, provider: OidcProvider) -> OpenIdConnectOptions:
        kwargs = {}
        scopes = parse_scopes(provider.scopes)
        if scopes:
            kwargs["scopes"] = scopes
        return OpenIdConnectOptions(
            scheme=provider.scheme,
            authority=provider.authority,
            client_id=provider.client_id,
            client_secret=provider.client_secret or None,
            response_type=provider.response_type,
            callback_path=provider.callback_path,
            get_claims_from_userinfo_endpoint=provider.get_claims_from_userinfo_endpoint,
            save_tokens=provider.save_tokens,
            require_https_metadata=provider.require_https_metadata,
            metadata_address=provider.metadata_address or None,
            # Post-handshake principal lands in the local session, not the upstream one
            sign_in_scheme=self._settings.local_session_scheme,
            **kwargs,
        )

    def placeholder(self, scheme: str) -> OpenIdConnectOptions:
        return OpenIdConnectOptions(
            scheme=scheme,
            authority=self._settings.placeholder_authority,
            client_id=self._settings.placeholder_client_id,
            sign_in_scheme=self._settings.local_session_scheme,
        )
