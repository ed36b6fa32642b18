"""Unit tests for principal resolution against a real store."""

import pytest

from notespace.core.errors import Unauthenticated
from notespace.models.tenant import SubscriptionTier, Tenant
from notespace.models.user import User, UserRole
from notespace.services.principal import resolve_principal


async def _seed(store, slug: str = "acme"):
    tenant, admin = await store.create_tenant_with_admin(
        Tenant(name=slug.title(), slug=slug),
        User(email=f"admin@{slug}.com", password_hash="x"),
    )
    return tenant, admin


@pytest.mark.asyncio
async def test_missing_token(store, tokens):
    with pytest.raises(Unauthenticated, match="Access token required"):
        await resolve_principal(None, tokens, store)
    with pytest.raises(Unauthenticated):
        await resolve_principal("", tokens, store)


@pytest.mark.asyncio
async def test_resolves_live_role_and_tier(store, tokens):
    tenant, admin = await _seed(store)
    member = await store.add_user(User(
        tenant_id=tenant.id, email="m@acme.com", password_hash="x", role=UserRole.MEMBER,
    ))
    # Claims say admin; the store says member
    token = tokens.issue(member.id, tenant.id, UserRole.ADMIN)

    principal = await resolve_principal(token, tokens, store)
    assert principal.user_id == member.id
    assert principal.tenant_id == tenant.id
    assert principal.role == UserRole.MEMBER
    assert principal.tenant_slug == "acme"
    assert principal.subscription_tier == SubscriptionTier.FREE

    await store.set_subscription_tier(tenant.id, SubscriptionTier.PRO)
    principal = await resolve_principal(token, tokens, store)
    assert principal.subscription_tier == SubscriptionTier.PRO


@pytest.mark.asyncio
async def test_tenant_comes_from_store_not_claims(store, tokens):
    acme, admin = await _seed(store, "acme")
    globex, _ = await _seed(store, "globex")

    forged = tokens.issue(admin.id, globex.id, UserRole.ADMIN)
    principal = await resolve_principal(forged, tokens, store)
    assert principal.tenant_id == acme.id


@pytest.mark.asyncio
async def test_deleted_user_is_unauthenticated(store, tokens):
    tenant, admin = await _seed(store)
    member = await store.add_user(User(tenant_id=tenant.id, email="gone@acme.com", password_hash="x"))
    token = tokens.issue(member.id, tenant.id, UserRole.MEMBER)

    await store.delete_user(tenant.id, member.id)

    with pytest.raises(Unauthenticated, match="user not found"):
        await resolve_principal(token, tokens, store)


@pytest.mark.asyncio
async def test_garbage_token(store, tokens):
    with pytest.raises(Unauthenticated, match="Invalid token"):
        await resolve_principal("a.b.c", tokens, store)
