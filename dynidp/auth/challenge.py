"""Challenge orchestrator — entry point of the external login flow.

    1. Validate the return URL (local path or trusted protocol target)
    2. Make sure the scheme is routable, registering enabled OIDC providers on demand
    3. Ask the OIDC handler for the upstream authorization URL
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from dynidp.auth.oidc import OpenIdConnectHandler
from dynidp.auth.resolver import SchemeResolver
from dynidp.auth.schemes import OIDC_HANDLER, AuthenticationScheme, AuthenticationSchemeProvider
from dynidp.core.config import Settings, get_settings
from dynidp.core.errors import HandshakeError, InvalidReturnUrlError, UnknownSchemeError
from dynidp.core.logging import get_logger

logger = get_logger(__name__)

APP_ROOT = "/"
CALLBACK_PATH = "/externallogin/callback"


@dataclass(frozen=True)
class ChallengeResult:
    redirect_url: str
    scheme: str
    return_url: str


def is_local_url(url: str) -> bool:
    """Same-origin relative path: "/x" or "~/x", never "//host" or "/\\host".

    Control characters are refused outright; browsers strip some of them, which
    would turn "/\\t/host" into a protocol-relative URL.
    """
    if not url or any(ord(c) < 0x20 or ord(c) == 0x7F for c in url):
        return False
    if url.startswith("~/"):
        path = url[1:]
    elif url.startswith("/"):
        path = url
    else:
        return False
    if len(path) == 1:
        return True
    return path[1] not in ("/", "\\")


def _origin(url: str) -> str | None:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}".lower()


class ChallengeOrchestrator:
    def __init__(
        self,
        schemes: AuthenticationSchemeProvider,
        resolver: SchemeResolver,
        handler: OpenIdConnectHandler,
        settings: Settings | None = None,
    ) -> None:
        self._schemes = schemes
        self._resolver = resolver
        self._handler = handler
        self._settings = settings or get_settings()

    def is_protocol_return_url(self, url: str) -> bool:
        origin = _origin(url)
        if origin is None:
            return False
        trusted = {_origin(self._settings.public_base_url)}
        trusted.update(_origin(o) for o in self._settings.trusted_return_origins)
        return origin in trusted

    def validate_return_url(self, return_url: str | None) -> str:
        """Return the normalized target or raise InvalidReturnUrlError."""
        if not return_url:
            return APP_ROOT
        if is_local_url(return_url):
            return APP_ROOT + return_url[2:] if return_url.startswith("~/") else return_url
        if self.is_protocol_return_url(return_url):
            return return_url
        # Possibly a crafted link pointing users at a foreign site
        logger.warning("Rejected return URL", return_url=return_url, security_event=True)
        raise InvalidReturnUrlError(return_url)

    async def ensure_scheme(self, scheme: str) -> AuthenticationScheme:
        existing = self._schemes.get_scheme(scheme)
        if existing is not None:
            return existing
        if not await self._resolver.scheme_exists(scheme):
            logger.warning("Challenge for unknown scheme", scheme=scheme)
            raise UnknownSchemeError(scheme)
        logger.info("Registering dynamic OIDC scheme", scheme=scheme)
        return self._schemes.add_scheme(AuthenticationScheme(name=scheme, handler=OIDC_HANDLER))

    async def challenge(self, scheme: str, return_url: str | None) -> ChallengeResult:
        target = self.validate_return_url(return_url)
        registered = await self.ensure_scheme(scheme)
        if registered.handler != OIDC_HANDLER:
            raise HandshakeError(f"Scheme '{scheme}' does not support external challenges")

        redirect_url = await self._handler.challenge(scheme, target, CALLBACK_PATH)
        return ChallengeResult(redirect_url=redirect_url, scheme=scheme, return_url=target)
