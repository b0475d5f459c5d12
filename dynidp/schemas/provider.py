"""Schemas for the dynamic provider admin API."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# ── OIDC ──────────────────────────────────────────────────────────────────────


class OidcProviderIn(BaseModel):
    """Full OIDC record as written by an administrator (create and replace)."""

    # Path id on PUT must match; ignored on POST
    id: uuid.UUID | None = None
    scheme: str = Field(..., min_length=1, max_length=200)
    display_name: str = Field(..., min_length=1, max_length=200)
    enabled: bool = True
    authority: str = Field(..., min_length=1, max_length=500)
    client_id: str = Field(..., min_length=1, max_length=200)
    # None = keep existing secret on update; empty string = clear it
    client_secret: str | None = Field(default=None, max_length=500)
    response_type: str = Field(default="code", min_length=1, max_length=100)
    scopes: str = Field(default="openid profile", max_length=500)
    callback_path: str = Field(default="/signin-oidc", pattern=r"^/", max_length=200)
    get_claims_from_userinfo_endpoint: bool = True
    save_tokens: bool = True
    metadata_address: str | None = Field(default=None, max_length=500)
    require_https_metadata: bool = True


class OidcProviderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    scheme: str
    display_name: str
    enabled: bool
    provider_type: Literal["OIDC"] = "OIDC"
    authority: str
    client_id: str
    # Secret is masked in responses
    client_secret_set: bool = False
    response_type: str
    scopes: str
    callback_path: str
    get_claims_from_userinfo_endpoint: bool
    save_tokens: bool
    metadata_address: str | None
    require_https_metadata: bool
    created: datetime
    updated: datetime | None

    @classmethod
    def from_orm_masked(cls, obj) -> "OidcProviderOut":
        data = cls.model_validate(obj).model_dump()
        data["client_secret_set"] = bool(obj.client_secret)
        return cls(**data)


# ── SAML ──────────────────────────────────────────────────────────────────────


class SamlProviderIn(BaseModel):
    """Full SAML record as written by an administrator (create and replace)."""

    id: uuid.UUID | None = None
    scheme: str = Field(..., min_length=1, max_length=200)
    display_name: str = Field(..., min_length=1, max_length=200)
    enabled: bool = True
    sp_entity_id: str = Field(..., min_length=1, max_length=500)
    idp_entity_id: str = Field(..., min_length=1, max_length=500)
    idp_single_sign_on_url: str = Field(..., min_length=1, max_length=500)
    idp_metadata_url: str | None = Field(default=None, max_length=500)
    acs_path: str = Field(default="/saml/acs", pattern=r"^/", max_length=200)
    idp_certificate: str | None = None
    # None = keep existing value on update; empty string = clear it
    sp_certificate: str | None = None
    sp_certificate_password: str | None = Field(default=None, max_length=200)
    sign_authentication_requests: bool = False
    want_assertions_signed: bool = True
    name_id_format: str = Field(
        default="urn:oasis:names:tc:SAML:1.1:nameid-format:unspecified", max_length=200
    )
    binding_type: str = Field(default="POST", pattern="^(POST|Redirect)$")


class SamlProviderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    scheme: str
    display_name: str
    enabled: bool
    provider_type: Literal["SAML"] = "SAML"
    sp_entity_id: str
    idp_entity_id: str
    idp_single_sign_on_url: str
    idp_metadata_url: str | None
    acs_path: str
    idp_certificate: str | None
    sp_certificate_set: bool = False
    sp_certificate_password_set: bool = False
    sign_authentication_requests: bool
    want_assertions_signed: bool
    name_id_format: str
    binding_type: str
    created: datetime
    updated: datetime | None

    @classmethod
    def from_orm_masked(cls, obj) -> "SamlProviderOut":
        data = cls.model_validate(obj).model_dump()
        data["sp_certificate_set"] = bool(obj.sp_certificate)
        data["sp_certificate_password_set"] = bool(obj.sp_certificate_password)
        return cls(**data)


# ── Merged view ───────────────────────────────────────────────────────────────

ProviderOut = Annotated[
    Union[OidcProviderOut, SamlProviderOut], Field(discriminator="provider_type")
]


class ErrorOut(BaseModel):
    detail: str
