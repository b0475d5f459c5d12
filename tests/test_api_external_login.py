"""Tests for GET /externallogin/challenge, including cache coherency via the admin API."""

from urllib.parse import parse_qs, urlsplit

import pytest


async def _challenge(client, scheme, return_url=None):
    params = {"scheme": scheme}
    if return_url is not None:
        params["returnUrl"] = return_url
    return await client.get("/externallogin/challenge", params=params, follow_redirects=False)


@pytest.mark.asyncio
async def test_challenge_redirects_to_provider(client, oidc_payload):
    await client.post("/api/providers/oidc", json=oidc_payload())

    r = await _challenge(client, "s1", "/local/path")

    assert r.status_code == 302
    location = urlsplit(r.headers["location"])
    assert location.netloc == "login.one.example"
    assert parse_qs(location.query)["client_id"] == ["client-one"]


@pytest.mark.asyncio
async def test_challenge_empty_return_url_defaults_to_root(client, oidc_payload):
    await client.post("/api/providers/oidc", json=oidc_payload())
    r = await _challenge(client, "s1", "")
    assert r.status_code == 302


@pytest.mark.asyncio
async def test_challenge_external_return_url_rejected(client, oidc_payload):
    await client.post("/api/providers/oidc", json=oidc_payload())

    r = await _challenge(client, "s1", "https://evil.example.com/x")

    assert r.status_code == 400
    assert "Sign-in failed" in r.text
    assert "evil.example.com" not in r.text


@pytest.mark.asyncio
async def test_challenge_unknown_scheme_shows_generic_failure(client):
    r = await _challenge(client, "missing", "/")
    assert r.status_code == 400
    assert "Sign-in failed" in r.text


@pytest.mark.asyncio
async def test_update_through_api_invalidates_cached_options(app, client, oidc_payload):
    created = (await client.post("/api/providers/oidc", json=oidc_payload())).json()

    first = await _challenge(client, "s1", "/")
    assert urlsplit(first.headers["location"]).netloc == "login.one.example"
    assert app.state.options_cache.get("s1") is not None

    r = await client.put(
        f"/api/providers/oidc/{created['id']}",
        json=oidc_payload(authority="https://login.two.example"),
    )
    assert r.status_code == 200
    assert app.state.options_cache.get("s1") is None

    second = await _challenge(client, "s1", "/")
    assert urlsplit(second.headers["location"]).netloc == "login.two.example"


@pytest.mark.asyncio
async def test_delete_through_api_makes_scheme_unknown(app, client, oidc_payload):
    created = (await client.post("/api/providers/oidc", json=oidc_payload())).json()
    assert (await _challenge(client, "s1", "/")).status_code == 302

    await client.delete(f"/api/providers/oidc/{created['id']}")

    assert app.state.scheme_provider.get_scheme("s1") is None
    assert (await _challenge(client, "s1", "/")).status_code == 400


@pytest.mark.asyncio
async def test_challenge_with_unreadable_secret_shows_generic_failure(engine, client, oidc_payload):
    await client.post("/api/providers/oidc", json=oidc_payload())
    async with engine.begin() as conn:
        await conn.exec_driver_sql("UPDATE oidc_providers SET client_secret = 'garbage'")

    r = await _challenge(client, "s1", "/")

    assert r.status_code == 400
    assert "Sign-in failed" in r.text
