"""Domain errors raised by the provider registry and the external-login flow.

Routers translate these into HTTP responses; nothing here knows about HTTP.
"""

from __future__ import annotations


class DynIdpError(Exception):
    """Base class for all dynidp domain errors."""


class ValidationError(DynIdpError):
    """A create/update was malformed or collides with an existing scheme."""


class NotFoundError(DynIdpError):
    """The targeted provider id does not exist."""

    def __init__(self, kind: str, provider_id: object) -> None:
        super().__init__(f"{kind} provider with ID {provider_id} not found")
        self.kind = kind
        self.provider_id = provider_id


class UnknownSchemeError(DynIdpError):
    """No enabled provider backs the requested authentication scheme."""

    def __init__(self, scheme: str) -> None:
        super().__init__(f"Authentication scheme '{scheme}' not found")
        self.scheme = scheme


class InvalidReturnUrlError(DynIdpError):
    """The post-login return URL is neither local nor a trusted protocol target."""

    def __init__(self, return_url: str) -> None:
        super().__init__("invalid return URL")
        self.return_url = return_url


class HandshakeError(DynIdpError):
    """The federated handshake could not be started or its state is invalid."""
