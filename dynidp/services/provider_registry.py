"""Provider registry service — business-level CRUD over the provider store.

Every mutation is its own unit of work: the service commits, then evicts the
affected scheme(s) from the options cache so that no resolution happening
after the call returns can observe the previous record.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Generic

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dynidp.auth.cache import OptionsCache
from dynidp.core.errors import NotFoundError, ValidationError
from dynidp.core.logging import get_logger
from dynidp.models.provider import AnyProvider, OidcProvider, SamlProvider
from dynidp.services.provider_store import P, ProviderStore

logger = get_logger(__name__)

# Write-only columns: None keeps the stored value on update, "" clears it
SECRET_FIELDS: dict[type, tuple[str, ...]] = {
    OidcProvider: ("client_secret",),
    SamlProvider: ("sp_certificate", "sp_certificate_password"),
}

_READ_ONLY_FIELDS = ("id", "provider_type", "created", "updated")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProviderKindService(Generic[P]):
    """CRUD for one provider kind (OIDC or SAML)."""

    def __init__(
        self,
        session: AsyncSession,
        store: ProviderStore[P],
        sibling: ProviderStore,
        options_cache: OptionsCache | None = None,
    ) -> None:
        self._session = session
        self._store = store
        self._sibling = sibling
        self._cache = options_cache
        self.kind = store.model.KIND.value

    async def get_all(self) -> list[P]:
        return await self._store.list_all()

    async def get_by_id(self, provider_id: uuid.UUID) -> P | None:
        return await self._store.get_by_id(provider_id)

    async def get_by_scheme(self, scheme: str) -> P | None:
        return await self._store.get_by_scheme(scheme)

    async def get_enabled(self) -> list[P]:
        return await self._store.list_by_enabled(True)

    async def create(self, data: dict[str, Any]) -> P:
        values = self._clean(data, updating=False)
        await self._ensure_scheme_available(values["scheme"])

        provider = self._store.model(**values)
        provider.created = _utcnow()
        provider.updated = None
        try:
            provider = await self._store.insert(provider)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValidationError(f"Scheme '{values['scheme']}' already exists") from exc

        # A placeholder may have been served for this scheme before it existed
        self._invalidate(provider.scheme)
        logger.info("Provider created", kind=self.kind, scheme=provider.scheme, id=str(provider.id))
        return provider

    async def update(self, provider_id: uuid.UUID, data: dict[str, Any]) -> P:
        provider = await self._store.get_by_id(provider_id)
        if provider is None:
            raise NotFoundError(self.kind, provider_id)

        values = self._clean(data, updating=True)
        previous_scheme = provider.scheme
        new_scheme = values.get("scheme", previous_scheme)
        if new_scheme != previous_scheme:
            await self._ensure_scheme_available(new_scheme, exclude_id=provider.id)

        values["updated"] = _utcnow()
        try:
            provider = await self._store.replace(provider, values)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValidationError(f"Scheme '{new_scheme}' already exists") from exc

        self._invalidate(previous_scheme)
        if new_scheme != previous_scheme:
            self._invalidate(new_scheme)
        logger.info(
            "Provider updated",
            kind=self.kind,
            scheme=new_scheme,
            previous_scheme=previous_scheme,
            enabled=provider.enabled,
        )
        return provider

    async def delete(self, provider_id: uuid.UUID) -> None:
        provider = await self._store.get_by_id(provider_id)
        scheme = provider.scheme if provider is not None else None

        rows = await self._store.delete_by_id(provider_id)
        if rows == 0:
            raise NotFoundError(self.kind, provider_id)
        await self._session.commit()

        if scheme is not None:
            self._invalidate(scheme)
        logger.info("Provider deleted", kind=self.kind, scheme=scheme, id=str(provider_id))

    # ── helpers ──────────────────────────────────────────────────────────────

    def _clean(self, data: dict[str, Any], *, updating: bool) -> dict[str, Any]:
        values = {k: v for k, v in data.items() if k not in _READ_ONLY_FIELDS}
        for field in SECRET_FIELDS[self._store.model]:
            if field not in values:
                continue
            if values[field] is None and updating:
                values.pop(field)
            elif not values[field]:
                values[field] = None

        for field in ("scheme", "display_name"):
            if field in values:
                values[field] = (values[field] or "").strip()
                if not values[field]:
                    raise ValidationError(f"'{field}' must not be empty")
        if not updating and "scheme" not in values:
            raise ValidationError("'scheme' is required")
        return values

    async def _ensure_scheme_available(
        self, scheme: str, exclude_id: uuid.UUID | None = None
    ) -> None:
        existing = await self._store.get_by_scheme(scheme)
        if existing is not None and existing.id != exclude_id:
            raise ValidationError(f"{self.kind} provider with scheme '{scheme}' already exists")
        if await self._sibling.get_by_scheme(scheme) is not None:
            other = self._sibling.model.KIND.value
            raise ValidationError(f"Scheme '{scheme}' is already used by a {other} provider")

    def _invalidate(self, scheme: str) -> None:
        if self._cache is not None:
            self._cache.invalidate(scheme)


class ProviderRegistryService:
    """Entry point for provider administration.

    Usage:
        registry = ProviderRegistryService(session, options_cache)
        provider = await registry.oidc.create({...})
        enabled = await registry.get_all_enabled_providers()
    """

    def __init__(self, session: AsyncSession, options_cache: OptionsCache | None = None) -> None:
        oidc_store = ProviderStore(session, OidcProvider)
        saml_store = ProviderStore(session, SamlProvider)
        self.oidc: ProviderKindService[OidcProvider] = ProviderKindService(
            session, oidc_store, saml_store, options_cache
        )
        self.saml: ProviderKindService[SamlProvider] = ProviderKindService(
            session, saml_store, oidc_store, options_cache
        )

    async def get_all_enabled_providers(self) -> list[AnyProvider]:
        """Enabled providers of every kind, ordered by display name.

        Both queries share one AsyncSession, which does not allow concurrent
        operations, so they run back to back.
        """
        providers: list[AnyProvider] = [
            *await self.oidc.get_enabled(),
            *await self.saml.get_enabled(),
        ]
        return sorted(providers, key=lambda p: p.display_name)
