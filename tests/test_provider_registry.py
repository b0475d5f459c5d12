"""Tests for the provider store and registry service."""

import uuid

import pytest
from sqlalchemy import text

from dynidp.core.errors import NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_create_stamps_created_only(registry, oidc_payload):
    provider = await registry.oidc.create(oidc_payload())

    assert provider.id is not None
    assert provider.created is not None
    assert provider.updated is None
    assert provider.provider_type == "OIDC"


@pytest.mark.asyncio
async def test_duplicate_scheme_same_kind_rejected(registry, oidc_payload):
    await registry.oidc.create(oidc_payload())
    with pytest.raises(ValidationError, match="already exists"):
        await registry.oidc.create(oidc_payload(display_name="Other"))


@pytest.mark.asyncio
async def test_duplicate_scheme_across_kinds_rejected(registry, oidc_payload, saml_payload):
    await registry.oidc.create(oidc_payload(scheme="shared"))
    with pytest.raises(ValidationError, match="OIDC"):
        await registry.saml.create(saml_payload(scheme="shared"))


@pytest.mark.asyncio
async def test_empty_scheme_rejected(registry, oidc_payload):
    with pytest.raises(ValidationError):
        await registry.oidc.create(oidc_payload(scheme="   "))


@pytest.mark.asyncio
async def test_update_stamps_updated_and_keeps_identity(registry, oidc_payload):
    created = await registry.oidc.create(oidc_payload())
    created_at = created.created

    updated = await registry.oidc.update(
        created.id, oidc_payload(authority="https://new.example", provider_type="SAML")
    )

    assert updated.id == created.id
    assert updated.authority == "https://new.example"
    assert updated.updated is not None
    assert updated.created == created_at
    assert updated.provider_type == "OIDC"


@pytest.mark.asyncio
async def test_update_unknown_id_raises_not_found(registry, oidc_payload):
    with pytest.raises(NotFoundError):
        await registry.oidc.update(uuid.uuid4(), oidc_payload())


@pytest.mark.asyncio
async def test_update_to_taken_scheme_rejected(registry, oidc_payload):
    await registry.oidc.create(oidc_payload(scheme="a"))
    b = await registry.oidc.create(oidc_payload(scheme="b"))
    with pytest.raises(ValidationError):
        await registry.oidc.update(b.id, oidc_payload(scheme="a"))


@pytest.mark.asyncio
async def test_delete_unknown_id_raises_not_found(registry):
    with pytest.raises(NotFoundError):
        await registry.oidc.delete(uuid.uuid4())
    with pytest.raises(NotFoundError):
        await registry.saml.delete(uuid.uuid4())


@pytest.mark.asyncio
async def test_delete_removes_record(registry, oidc_payload):
    provider = await registry.oidc.create(oidc_payload())
    await registry.oidc.delete(provider.id)
    assert await registry.oidc.get_by_scheme("s1") is None


@pytest.mark.asyncio
async def test_disabled_hidden_from_enabled_view_but_found_by_id(registry, oidc_payload):
    provider = await registry.oidc.create(oidc_payload())
    await registry.oidc.update(provider.id, oidc_payload(enabled=False))

    assert await registry.get_all_enabled_providers() == []
    fetched = await registry.oidc.get_by_id(provider.id)
    assert fetched is not None
    assert fetched.enabled is False


@pytest.mark.asyncio
async def test_enabled_view_merges_kinds_sorted_by_display_name(
    registry, oidc_payload, saml_payload
):
    await registry.oidc.create(oidc_payload(scheme="beta", display_name="Beta"))
    await registry.saml.create(saml_payload(scheme="alpha", display_name="Alpha"))
    await registry.oidc.create(oidc_payload(scheme="off", display_name="Aardvark", enabled=False))

    providers = await registry.get_all_enabled_providers()

    assert [p.display_name for p in providers] == ["Alpha", "Beta"]
    assert [p.provider_type for p in providers] == ["SAML", "OIDC"]


@pytest.mark.asyncio
async def test_secret_kept_when_omitted_and_cleared_when_empty(registry, oidc_payload):
    provider = await registry.oidc.create(oidc_payload(client_secret="s3cret"))

    kept = await registry.oidc.update(provider.id, oidc_payload(client_secret=None))
    assert kept.client_secret == "s3cret"

    cleared = await registry.oidc.update(provider.id, oidc_payload(client_secret=""))
    assert cleared.client_secret is None


@pytest.mark.asyncio
async def test_secrets_encrypted_at_rest(registry, db_session, oidc_payload):
    await registry.oidc.create(oidc_payload(client_secret="plain-secret"))

    raw = (
        await db_session.execute(text("SELECT client_secret FROM oidc_providers"))
    ).scalar_one()
    assert raw != "plain-secret"
    assert "plain-secret" not in raw


@pytest.mark.asyncio
async def test_update_and_delete_invalidate_cache(registry, options_cache, resolver, oidc_payload):
    provider = await registry.oidc.create(oidc_payload())
    await options_cache.get_or_resolve("s1", resolver.resolve)
    assert "s1" in options_cache

    await registry.oidc.update(provider.id, oidc_payload(scheme="s1-renamed"))
    assert "s1" not in options_cache

    await options_cache.get_or_resolve("s1-renamed", resolver.resolve)
    assert "s1-renamed" in options_cache
    await registry.oidc.delete(provider.id)
    assert "s1-renamed" not in options_cache
