"""Sample dynamic providers for development and demos.

Every entry is inserted only when its scheme is not registered yet, so running
the seed repeatedly is harmless. All but the public demo server start disabled.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from dynidp.core.logging import get_logger
from dynidp.services.provider_registry import ProviderRegistryService

logger = get_logger(__name__)

_OIDC_COMMON: dict[str, Any] = {
    "scopes": "openid profile email",
    "get_claims_from_userinfo_endpoint": True,
    "save_tokens": True,
    "require_https_metadata": True,
    "response_type": "code",
}

SAMPLE_OIDC_PROVIDERS: list[dict[str, Any]] = [
    {
        "scheme": "google",
        "display_name": "Google",
        "enabled": False,
        "authority": "https://accounts.google.com",
        "client_id": "YOUR_GOOGLE_CLIENT_ID",
        "client_secret": "YOUR_GOOGLE_CLIENT_SECRET",
        "callback_path": "/signin-google",
        **_OIDC_COMMON,
    },
    {
        "scheme": "microsoft",
        "display_name": "Microsoft",
        "enabled": False,
        "authority": "https://login.microsoftonline.com/common/v2.0",
        "client_id": "YOUR_MICROSOFT_CLIENT_ID",
        "client_secret": "YOUR_MICROSOFT_CLIENT_SECRET",
        "callback_path": "/signin-microsoft",
        **_OIDC_COMMON,
    },
    {
        "scheme": "auth0",
        "display_name": "Auth0",
        "enabled": False,
        "authority": "https://YOUR_DOMAIN.auth0.com",
        "client_id": "YOUR_AUTH0_CLIENT_ID",
        "client_secret": "YOUR_AUTH0_CLIENT_SECRET",
        "callback_path": "/signin-auth0",
        **_OIDC_COMMON,
    },
    {
        "scheme": "okta",
        "display_name": "Okta",
        "enabled": False,
        "authority": "https://YOUR_DOMAIN.okta.com/oauth2/default",
        "client_id": "YOUR_OKTA_CLIENT_ID",
        "client_secret": "YOUR_OKTA_CLIENT_SECRET",
        "callback_path": "/signin-okta",
        **_OIDC_COMMON,
    },
    {
        "scheme": "demo-duende",
        "display_name": "Demo IdentityServer",
        "enabled": True,
        "authority": "https://demo.duendesoftware.com",
        "client_id": "interactive.public",
        "client_secret": "",
        "callback_path": "/signin-demo",
        **_OIDC_COMMON,
        "scopes": "openid profile email api",
    },
]

SAMPLE_SAML_PROVIDERS: list[dict[str, Any]] = [
    {
        "scheme": "saml-example",
        "display_name": "SAML Provider Example",
        "enabled": False,
        "sp_entity_id": "https://localhost:5443",
        "idp_entity_id": "https://idp.example.com",
        "idp_single_sign_on_url": "https://idp.example.com/sso",
        "idp_metadata_url": "https://idp.example.com/metadata",
        "acs_path": "/saml/acs",
        "sign_authentication_requests": False,
        "want_assertions_signed": True,
        "name_id_format": "urn:oasis:names:tc:SAML:1.1:nameid-format:unspecified",
        "binding_type": "POST",
    },
]


async def seed_providers(session: AsyncSession) -> list[str]:
    """Insert missing sample providers; returns the schemes that were created."""
    registry = ProviderRegistryService(session)
    created: list[str] = []

    for kind, samples in ((registry.oidc, SAMPLE_OIDC_PROVIDERS), (registry.saml, SAMPLE_SAML_PROVIDERS)):
        for sample in samples:
            if await kind.get_by_scheme(sample["scheme"]) is not None:
                continue
            await kind.create(dict(sample))
            created.append(sample["scheme"])

    logger.info("Sample providers seeded", created=created)
    return created
