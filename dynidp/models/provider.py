"""Dynamic provider models — one table per protocol kind.

OIDC and SAML rows share the columns declared on `ProviderMixin`; the pair
forms the closed `AnyProvider` variant used by the merged enabled-providers view.
"""

from __future__ import annotations

import enum
from typing import Union

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dynidp.models.base import Base, EncryptedText, TimestampMixin, UUIDPrimaryKeyMixin


class ProviderType(str, enum.Enum):
    OIDC = "OIDC"
    SAML = "SAML"


class ProviderMixin(UUIDPrimaryKeyMixin, TimestampMixin):
    """Columns common to every dynamic provider.

    Concrete classes set KIND, which fixes provider_type at construction.
    """

    # Authentication scheme name, the natural key used at request time
    scheme: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)

    # Label shown on the login button
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    # Fixed per table; never taken from user input
    provider_type: Mapped[str] = mapped_column(String(50), nullable=False)

    def __init__(self, **kwargs) -> None:
        kwargs["provider_type"] = self.KIND.value
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} scheme={self.scheme!r} enabled={self.enabled}>"


class OidcProvider(ProviderMixin, Base):
    __tablename__ = "oidc_providers"

    KIND = ProviderType.OIDC

    # Issuer base URL (e.g. https://accounts.google.com)
    authority: Mapped[str] = mapped_column(String(500), nullable=False)

    client_id: Mapped[str] = mapped_column(String(200), nullable=False)

    # NULL / empty for public clients
    client_secret: Mapped[str | None] = mapped_column(EncryptedText, nullable=True)

    response_type: Mapped[str] = mapped_column(String(100), nullable=False, default="code")

    # Space- or comma-separated
    scopes: Mapped[str] = mapped_column(String(500), nullable=False, default="openid profile")

    callback_path: Mapped[str] = mapped_column(String(200), nullable=False, default="/signin-oidc")

    get_claims_from_userinfo_endpoint: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    save_tokens: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Overrides <authority>/.well-known/openid-configuration when set
    metadata_address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    require_https_metadata: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class SamlProvider(ProviderMixin, Base):
    __tablename__ = "saml_providers"

    KIND = ProviderType.SAML

    sp_entity_id: Mapped[str] = mapped_column(String(500), nullable=False)
    idp_entity_id: Mapped[str] = mapped_column(String(500), nullable=False)
    idp_single_sign_on_url: Mapped[str] = mapped_column(String(500), nullable=False)
    idp_metadata_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Assertion Consumer Service path
    acs_path: Mapped[str] = mapped_column(String(200), nullable=False, default="/saml/acs")

    # Base64 certificate (public material)
    idp_certificate: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Base64 PFX and its password
    sp_certificate: Mapped[str | None] = mapped_column(EncryptedText, nullable=True)
    sp_certificate_password: Mapped[str | None] = mapped_column(EncryptedText, nullable=True)

    sign_authentication_requests: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    want_assertions_signed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    name_id_format: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        default="urn:oasis:names:tc:SAML:1.1:nameid-format:unspecified",
    )
    # "POST" | "Redirect"
    binding_type: Mapped[str] = mapped_column(String(50), nullable=False, default="POST")


AnyProvider = Union[OidcProvider, SamlProvider]
