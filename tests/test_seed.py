"""Tests for the sample provider seed and the CLI token command."""

import pytest
from click.testing import CliRunner

from dynidp.cli.main import cli
from dynidp.core.auth import decode_access_token
from dynidp.seed import SAMPLE_OIDC_PROVIDERS, SAMPLE_SAML_PROVIDERS, seed_providers
from dynidp.services.provider_registry import ProviderRegistryService


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session):
    first = await seed_providers(db_session)
    second = await seed_providers(db_session)

    assert len(first) == len(SAMPLE_OIDC_PROVIDERS) + len(SAMPLE_SAML_PROVIDERS)
    assert second == []


@pytest.mark.asyncio
async def test_only_demo_provider_enabled(db_session):
    await seed_providers(db_session)
    enabled = await ProviderRegistryService(db_session).get_all_enabled_providers()
    assert [p.scheme for p in enabled] == ["demo-duende"]
    assert enabled[0].client_secret is None


def test_token_command_prints_admin_jwt():
    result = CliRunner().invoke(cli, ["token", "--subject", "ops"])
    assert result.exit_code == 0
    claims = decode_access_token(result.output.strip())
    assert claims["sub"] == "ops"
    assert claims["role"] == "admin"
