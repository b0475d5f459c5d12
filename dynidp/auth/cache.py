"""Process-wide cache of resolved OIDC options, keyed by scheme name."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from dynidp.auth.options import OpenIdConnectOptions, Resolution
from dynidp.core.logging import get_logger

logger = get_logger(__name__)


class OptionsCache:
    """Lazily populated by the OIDC handler, evicted by provider administration.

    Only found resolutions are memoized, so a scheme whose record does not exist
    yet resolves again on every use until it does. While a resolution is in
    flight its key carries a generation number bumped by `invalidate`; a
    resolution that started before an invalidation is returned to its caller but
    never stored. Generations are dropped once no resolution is pending.
    """

    def __init__(self) -> None:
        self._entries: dict[str, OpenIdConnectOptions] = {}
        self._generations: dict[str, int] = {}
        self._pending: dict[str, int] = {}

    def get(self, scheme: str) -> OpenIdConnectOptions | None:
        return self._entries.get(scheme)

    async def get_or_resolve(
        self, scheme: str, resolve: Callable[[str], Awaitable[Resolution]]
    ) -> Resolution:
        cached = self._entries.get(scheme)
        if cached is not None:
            return Resolution(options=cached, found=True)

        generation = self._generations.setdefault(scheme, 0)
        self._pending[scheme] = self._pending.get(scheme, 0) + 1
        try:
            resolution = await resolve(scheme)
            if resolution.found and self._generations.get(scheme) == generation:
                self._entries[scheme] = resolution.options
        finally:
            self._pending[scheme] -= 1
            if not self._pending[scheme]:
                del self._pending[scheme]
                del self._generations[scheme]
        return resolution

    def invalidate(self, scheme: str) -> bool:
        """Evict *scheme*; returns True if an entry was present."""
        if scheme in self._generations:
            self._generations[scheme] += 1
        removed = self._entries.pop(scheme, None) is not None
        logger.info("Options cache invalidated", scheme=scheme, evicted=removed)
        return removed

    def __contains__(self, scheme: str) -> bool:
        return scheme in self._entries

    def __len__(self) -> int:
        return len(self._entries)
