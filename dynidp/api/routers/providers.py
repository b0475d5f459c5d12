"""Providers router — admin CRUD for dynamic OIDC and SAML providers."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from dynidp.api.dependencies import get_registry_service, get_scheme_provider, require_admin
from dynidp.auth.schemes import AuthenticationSchemeProvider
from dynidp.core.errors import NotFoundError, ValidationError
from dynidp.core.logging import get_logger
from dynidp.models.provider import OidcProvider
from dynidp.schemas.provider import (
    ErrorOut,
    OidcProviderIn,
    OidcProviderOut,
    ProviderOut,
    SamlProviderIn,
    SamlProviderOut,
)
from dynidp.services.provider_registry import ProviderRegistryService

router = APIRouter(
    prefix="/api/providers",
    tags=["providers"],
    dependencies=[Depends(require_admin)],
    responses={404: {"model": ErrorOut}, 400: {"model": ErrorOut}},
)
logger = get_logger(__name__)

RegistryDep = Annotated[ProviderRegistryService, Depends(get_registry_service)]
SchemesDep = Annotated[AuthenticationSchemeProvider, Depends(get_scheme_provider)]


def _check_body_id(path_id: uuid.UUID, body_id: uuid.UUID | None) -> None:
    # A body without id is taken to mean the path id
    if body_id is not None and body_id != path_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Path id does not match body id",
        )


def _not_found(kind: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{kind} provider not found")


# ── Merged view ───────────────────────────────────────────────────────────────

@router.get("/all", response_model=list[ProviderOut])
async def list_enabled_providers(registry: RegistryDep) -> list:
    """All enabled providers of every kind, sorted by display name."""
    providers = await registry.get_all_enabled_providers()
    return [
        OidcProviderOut.from_orm_masked(p) if isinstance(p, OidcProvider)
        else SamlProviderOut.from_orm_masked(p)
        for p in providers
    ]


# ── OIDC providers ────────────────────────────────────────────────────────────

@router.get("/oidc", response_model=list[OidcProviderOut])
async def list_oidc_providers(registry: RegistryDep) -> list[OidcProviderOut]:
    return [OidcProviderOut.from_orm_masked(p) for p in await registry.oidc.get_all()]


@router.get("/oidc/{provider_id}", response_model=OidcProviderOut)
async def get_oidc_provider(provider_id: uuid.UUID, registry: RegistryDep) -> OidcProviderOut:
    provider = await registry.oidc.get_by_id(provider_id)
    if provider is None:
        raise _not_found("OIDC")
    return OidcProviderOut.from_orm_masked(provider)


@router.post("/oidc", response_model=OidcProviderOut, status_code=status.HTTP_201_CREATED)
async def create_oidc_provider(
    payload: OidcProviderIn, request: Request, response: Response, registry: RegistryDep
) -> OidcProviderOut:
    try:
        provider = await registry.oidc.create(payload.model_dump(exclude={"id"}))
    except ValidationError as exc:
        logger.warning("OIDC provider rejected", scheme=payload.scheme, error=str(exc))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    response.headers["Location"] = str(
        request.url_for("get_oidc_provider", provider_id=str(provider.id))
    )
    return OidcProviderOut.from_orm_masked(provider)


@router.put("/oidc/{provider_id}", response_model=OidcProviderOut)
async def update_oidc_provider(
    provider_id: uuid.UUID,
    payload: OidcProviderIn,
    registry: RegistryDep,
    schemes: SchemesDep,
) -> OidcProviderOut:
    _check_body_id(provider_id, payload.id)
    existing = await registry.oidc.get_by_id(provider_id)
    previous_scheme = existing.scheme if existing is not None else None
    try:
        provider = await registry.oidc.update(provider_id, payload.model_dump(exclude={"id"}))
    except NotFoundError:
        raise _not_found("OIDC")
    except ValidationError as exc:
        logger.warning("OIDC update rejected", id=str(provider_id), error=str(exc))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if previous_scheme is not None:
        schemes.forget_dynamic(previous_scheme)
    return OidcProviderOut.from_orm_masked(provider)


@router.delete("/oidc/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_oidc_provider(
    provider_id: uuid.UUID, registry: RegistryDep, schemes: SchemesDep
) -> None:
    existing = await registry.oidc.get_by_id(provider_id)
    scheme = existing.scheme if existing is not None else None
    try:
        await registry.oidc.delete(provider_id)
    except NotFoundError:
        raise _not_found("OIDC")
    if scheme is not None:
        schemes.forget_dynamic(scheme)


# ── SAML providers ────────────────────────────────────────────────────────────

@router.get("/saml", response_model=list[SamlProviderOut])
async def list_saml_providers(registry: RegistryDep) -> list[SamlProviderOut]:
    return [SamlProviderOut.from_orm_masked(p) for p in await registry.saml.get_all()]


@router.get("/saml/{provider_id}", response_model=SamlProviderOut)
async def get_saml_provider(provider_id: uuid.UUID, registry: RegistryDep) -> SamlProviderOut:
    provider = await registry.saml.get_by_id(provider_id)
    if provider is None:
        raise _not_found("SAML")
    return SamlProviderOut.from_orm_masked(provider)


@router.post("/saml", response_model=SamlProviderOut, status_code=status.HTTP_201_CREATED)
async def create_saml_provider(
    payload: SamlProviderIn, request: Request, response: Response, registry: RegistryDep
) -> SamlProviderOut:
    try:
        provider = await registry.saml.create(payload.model_dump(exclude={"id"}))
    except ValidationError as exc:
        logger.warning("SAML provider rejected", scheme=payload.scheme, error=str(exc))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    response.headers["Location"] = str(
        request.url_for("get_saml_provider", provider_id=str(provider.id))
    )
    return SamlProviderOut.from_orm_masked(provider)


@router.put("/saml/{provider_id}", response_model=SamlProviderOut)
async def update_saml_provider(
    provider_id: uuid.UUID, payload: SamlProviderIn, registry: RegistryDep
) -> SamlProviderOut:
    _check_body_id(provider_id, payload.id)
    try:
        provider = await registry.saml.update(provider_id, payload.model_dump(exclude={"id"}))
    except NotFoundError:
        raise _not_found("SAML")
    except ValidationError as exc:
        logger.warning("SAML update rejected", id=str(provider_id), error=str(exc))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return SamlProviderOut.from_orm_masked(provider)


@router.delete("/saml/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saml_provider(provider_id: uuid.UUID, registry: RegistryDep) -> None:
    try:
        await registry.saml.delete(provider_id)
    except NotFoundError:
        raise _not_found("SAML")
