"""Authentication scheme provider — the set of schemes the pipeline can route to."""

from __future__ import annotations

from dataclasses import dataclass

COOKIE_HANDLER = "cookie"
OIDC_HANDLER = "oidc"


@dataclass(frozen=True)
class AuthenticationScheme:
    name: str
    handler: str  # COOKIE_HANDLER | OIDC_HANDLER
    display_name: str | None = None


class AuthenticationSchemeProvider:
    """Static schemes registered at startup plus OIDC schemes added on demand.

    Dynamic registration only records that the OIDC handler owns the name;
    its options come from the options cache on first use.
    """

    def __init__(self, schemes: list[AuthenticationScheme] | None = None) -> None:
        self._schemes: dict[str, AuthenticationScheme] = {}
        for scheme in schemes or []:
            self.add_scheme(scheme)

    def get_scheme(self, name: str) -> AuthenticationScheme | None:
        return self._schemes.get(name)

    def add_scheme(self, scheme: AuthenticationScheme) -> AuthenticationScheme:
        # First registration wins
        return self._schemes.setdefault(scheme.name, scheme)

    def forget_dynamic(self, name: str) -> bool:
        """Drop an on-demand OIDC registration; static schemes are kept."""
        scheme = self._schemes.get(name)
        if scheme is None or scheme.handler != OIDC_HANDLER:
            return False
        del self._schemes[name]
        return True

    def names(self) -> list[str]:
        return list(self._schemes.keys())
