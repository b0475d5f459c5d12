"""OpenID Connect handler — starts the authorization-code handshake for a scheme.

Options are obtained through the options cache, so the first challenge for a
scheme resolves it from the database and later ones reuse the result until the
provider is changed. Token exchange and ID token validation happen on the
callback and are not part of this module.
"""

from __future__ import annotations

import base64
import hashlib
import json
import secrets
from collections.abc import Callable
from dataclasses import asdict, dataclass
from urllib.parse import urlencode

import httpx
from cryptography.fernet import InvalidToken

from dynidp.auth.cache import OptionsCache
from dynidp.auth.options import OpenIdConnectOptions
from dynidp.auth.resolver import SchemeResolver
from dynidp.core.config import Settings, get_settings
from dynidp.core.crypto import decrypt, encrypt
from dynidp.core.errors import HandshakeError, UnknownSchemeError
from dynidp.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChallengeState:
    """Properties carried through the upstream provider and back to the callback."""

    scheme: str
    return_url: str
    redirect_uri: str
    nonce: str
    code_verifier: str | None = None


def generate_pkce_pair() -> tuple[str, str]:
    """Return (code_verifier, S256 code_challenge)."""
    code_verifier = secrets.token_urlsafe(64)
    digest = hashlib.sha256(code_verifier.encode()).digest()
    code_challenge = base64.urlsafe_b64encode(digest).decode().rstrip("=")
    return code_verifier, code_challenge


class OpenIdConnectHandler:
    def __init__(
        self,
        options_cache: OptionsCache,
        resolver: SchemeResolver,
        settings: Settings | None = None,
        http_client_factory: Callable[[], httpx.AsyncClient] = httpx.AsyncClient,
    ) -> None:
        self._cache = options_cache
        self._resolver = resolver
        self._settings = settings or get_settings()
        self._http_client_factory = http_client_factory

    async def get_options(self, scheme: str) -> OpenIdConnectOptions:
        resolution = await self._cache.get_or_resolve(scheme, self._resolver.resolve)
        if not resolution.found:
            raise UnknownSchemeError(scheme)
        try:
            resolution.options.validate()
        except ValueError as exc:
            raise HandshakeError(f"Invalid options for scheme '{scheme}': {exc}") from exc
        return resolution.options

    async def fetch_metadata(self, options: OpenIdConnectOptions) -> dict:
        url = options.discovery_url
        try:
            async with self._http_client_factory() as client:
                resp = await client.get(
                    url, timeout=self._settings.discovery_timeout, follow_redirects=True
                )
                resp.raise_for_status()
                doc = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise HandshakeError(f"Failed to load discovery document from {url}: {exc}") from exc

        if not doc.get("authorization_endpoint"):
            raise HandshakeError(f"Discovery document at {url} has no authorization_endpoint")
        return doc

    async def challenge(self, scheme: str, return_url: str, callback_redirect: str) -> str:
        """Return the upstream authorization URL for *scheme*."""
        options = await self.get_options(scheme)
        metadata = await self.fetch_metadata(options)

        params = {
            "client_id": options.client_id,
            "redirect_uri": self.redirect_uri(options),
            "response_type": options.response_type,
            "scope": " ".join(options.scopes),
        }
        nonce = secrets.token_urlsafe(32)
        code_verifier = None
        if "code" in options.response_type.split():
            code_verifier, code_challenge = generate_pkce_pair()
            params["code_challenge"] = code_challenge
            params["code_challenge_method"] = "S256"

        state = ChallengeState(
            scheme=scheme,
            return_url=return_url,
            redirect_uri=callback_redirect,
            nonce=nonce,
            code_verifier=code_verifier,
        )
        params["state"] = self.encode_state(state)
        params["nonce"] = nonce

        endpoint = metadata["authorization_endpoint"]
        separator = "&" if "?" in endpoint else "?"
        logger.info("Starting OIDC challenge", scheme=scheme, authority=options.authority)
        return f"{endpoint}{separator}{urlencode(params)}"

    def redirect_uri(self, options: OpenIdConnectOptions) -> str:
        return self._settings.public_base_url.rstrip("/") + options.callback_path

    def encode_state(self, state: ChallengeState) -> str:
        return encrypt(json.dumps(asdict(state)))

    def decode_state(self, token: str) -> ChallengeState:
        try:
            raw = decrypt(token, ttl=self._settings.challenge_state_max_age)
            return ChallengeState(**json.loads(raw))
        except (InvalidToken, ValueError, TypeError) as exc:
            raise HandshakeError("Invalid or expired challenge state") from exc
