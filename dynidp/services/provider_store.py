"""Provider store — persistence primitives for one provider table."""

from __future__ import annotations

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from dynidp.models.provider import OidcProvider, SamlProvider

P = TypeVar("P", OidcProvider, SamlProvider)


class ProviderStore(Generic[P]):
    """Insert / get / list / replace / delete over a single provider model.

    Writes only flush; committing is the caller's unit of work.
    """

    def __init__(self, session: AsyncSession, model: type[P]) -> None:
        self._session = session
        self.model = model

    async def insert(self, provider: P) -> P:
        self._session.add(provider)
        await self._session.flush()
        await self._session.refresh(provider)
        return provider

    async def get_by_id(self, provider_id: uuid.UUID) -> P | None:
        return await self._session.get(self.model, provider_id)

    async def get_by_scheme(self, scheme: str, *, enabled_only: bool = False) -> P | None:
        stmt = select(self.model).where(self.model.scheme == scheme)
        if enabled_only:
            stmt = stmt.where(self.model.enabled.is_(True))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self) -> list[P]:
        result = await self._session.execute(select(self.model).order_by(self.model.created))
        return list(result.scalars().all())

    async def list_by_enabled(self, enabled: bool = True) -> list[P]:
        result = await self._session.execute(
            select(self.model).where(self.model.enabled.is_(enabled))
        )
        return list(result.scalars().all())

    async def replace(self, provider: P, values: dict[str, Any]) -> P:
        for field, value in values.items():
            setattr(provider, field, value)
        await self._session.flush()
        await self._session.refresh(provider)
        return provider

    async def delete_by_id(self, provider_id: uuid.UUID) -> int:
        """Delete the row; returns the number of rows removed (0 when absent)."""
        result = await self._session.execute(
            delete(self.model).where(self.model.id == provider_id)
        )
        return result.rowcount
