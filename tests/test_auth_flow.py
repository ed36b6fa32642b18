"""End-to-end auth flow: register tenant → use token → resolve live identity."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient


async def _register(client: AsyncClient, slug: str, **overrides) -> dict:
    """Helper: register a tenant + admin and return the response body."""
    payload = {
        "email": f"admin@{slug}.com",
        "password": "password123",
        "tenant_name": f"{slug.title()} Corp",
        "tenant_slug": slug,
    }
    payload.update(overrides)
    resp = await client.post("/v1/auth/register", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_register_and_authenticate(client: AsyncClient):
    """Full happy-path: register, use the token, read tenant usage."""
    data = await _register(client, "acme")
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "admin@acme.com"
    assert data["user"]["role"] == "admin"
    assert data["tenant"]["slug"] == "acme"
    assert data["tenant"]["subscription_tier"] == "free"
    assert "password_hash" not in data["user"]

    headers = {"Authorization": f"Bearer {data['access_token']}"}
    resp = await client.get("/v1/auth/me", headers=headers)
    assert resp.status_code == 200
    me = resp.json()
    assert me["tenant"]["id"] == data["tenant"]["id"]
    assert me["user"]["id"] == data["user"]["id"]


@pytest.mark.asyncio
async def test_slug_derived_from_tenant_name(client: AsyncClient):
    resp = await client.post("/v1/auth/register", json={
        "email": "owner@initech.com",
        "password": "password123",
        "tenant_name": "  Initech Software, Inc.  ",
    })
    assert resp.status_code == 201, resp.text
    assert resp.json()["tenant"]["slug"] == "initech-software-inc"


@pytest.mark.asyncio
async def test_explicit_slug_is_lowercased(client: AsyncClient):
    data = await _register(client, "Hooli", email="admin@hooli.com")
    assert data["tenant"]["slug"] == "hooli"


@pytest.mark.asyncio
async def test_duplicate_slug_rejected(client: AsyncClient):
    """Registering the same slug twice returns 409."""
    await _register(client, "unique-slug")

    resp = await client.post("/v1/auth/register", json={
        "email": "someone@else.com",
        "password": "password123",
        "tenant_name": "Other",
        "tenant_slug": "unique-slug",
    })
    assert resp.status_code == 409
    assert "already taken" in resp.json()["error"]


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client: AsyncClient):
    await _register(client, "first", email="shared@example.com")

    resp = await client.post("/v1/auth/register", json={
        "email": "SHARED@example.com",
        "password": "password123",
        "tenant_name": "Second",
        "tenant_slug": "second",
    })
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_invalid_slug_rejected(client: AsyncClient):
    resp = await client.post("/v1/auth/register", json={
        "email": "a@weird.com",
        "password": "password123",
        "tenant_name": "Weird",
        "tenant_slug": "not a slug!",
    })
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_reserved_tld_and_short_password_accepted(client: AsyncClient):
    data = await _register(client, "reserved", email="a@reserved.test", password="pw1")
    assert data["user"]["email"] == "a@reserved.test"

    resp = await client.post("/v1/auth/login", json={"email": "A@Reserved.test", "password": "pw1"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_empty_password_is_validation_error(client: AsyncClient):
    resp = await client.post("/v1/auth/register", json={
        "email": "a@empty.com",
        "password": "",
        "tenant_name": "Empty",
    })
    assert resp.status_code == 400
    assert "password" in resp.json()["error"]


@pytest.mark.asyncio
async def test_malformed_email_is_validation_error(client: AsyncClient):
    resp = await client.post("/v1/auth/register", json={
        "email": "not-an-email",
        "password": "pw1",
        "tenant_name": "Malformed",
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "A valid email address is required"


@pytest.mark.asyncio
async def test_invalid_token_rejected(client: AsyncClient):
    """A garbage token should return 401."""
    resp = await client.get(
        "/v1/auth/me",
        headers={"Authorization": "Bearer totally-fake-token"},
    )
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid token"}


@pytest.mark.asyncio
async def test_missing_auth_rejected(client: AsyncClient):
    """No Authorization header → 401."""
    resp = await client.get("/v1/auth/me")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Access token required"


@pytest.mark.asyncio
async def test_expired_token_rejected(client: AsyncClient, tokens):
    data = await _register(client, "expired")
    stale = tokens.issue(
        data["user"]["id"],
        data["tenant"]["id"],
        "admin",
        now=datetime.now(timezone.utc) - timedelta(days=2),
    )
    resp = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {stale}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Token expired"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_body(client: AsyncClient):
    resp = await client.get("/v1/nope")
    assert resp.status_code == 404
    assert "error" in resp.json()
