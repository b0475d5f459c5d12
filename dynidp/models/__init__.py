"""SQLAlchemy ORM models."""

from dynidp.models.base import Base
from dynidp.models.provider import AnyProvider, OidcProvider, ProviderType, SamlProvider

__all__ = ["Base", "AnyProvider", "OidcProvider", "ProviderType", "SamlProvider"]
