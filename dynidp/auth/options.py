"""OpenID Connect protocol options — the live form of a stored OIDC provider."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SCOPE_SEPARATORS = re.compile(r"[ ,]+")

DISCOVERY_SUFFIX = "/.well-known/openid-configuration"


def parse_scopes(value: str | None) -> tuple[str, ...]:
    """Split a space/comma separated scope string, dropping empty tokens."""
    if not value:
        return ()
    return tuple(token for token in _SCOPE_SEPARATORS.split(value.strip()) if token)


@dataclass(frozen=True)
class OpenIdConnectOptions:
    """Immutable handshake configuration for one scheme."""

    scheme: str
    authority: str
    client_id: str
    sign_in_scheme: str
    client_secret: str | None = None
    response_type: str = "code"
    callback_path: str = "/signin-oidc"
    scopes: tuple[str, ...] = ("openid", "profile")
    get_claims_from_userinfo_endpoint: bool = True
    save_tokens: bool = True
    require_https_metadata: bool = True
    metadata_address: str | None = None

    @property
    def discovery_url(self) -> str:
        if self.metadata_address:
            return self.metadata_address
        return self.authority.rstrip("/") + DISCOVERY_SUFFIX

    def validate(self) -> None:
        """Raise ValueError when the options could not drive a handshake."""
        if not self.authority and not self.metadata_address:
            raise ValueError("Provide authority or metadata_address")
        if not self.client_id:
            raise ValueError("client_id must be provided")
        if not self.callback_path.startswith("/"):
            raise ValueError("callback_path must start with '/'")
        if self.require_https_metadata and not self.discovery_url.startswith("https://"):
            raise ValueError("The metadata address must use HTTPS unless require_https_metadata is off")


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a scheme; `found` is False for placeholder options."""

    options: OpenIdConnectOptions
    found: bool
