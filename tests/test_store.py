"""Store-level tests: the last-admin guard and stored timestamps."""

import asyncio
from datetime import timedelta

import pytest

from notespace.core.errors import InvariantViolation
from notespace.models.base import utcnow
from notespace.models.note import Note
from notespace.models.tenant import Tenant
from notespace.models.user import User, UserRole


async def _seed(store, slug: str):
    return await store.create_tenant_with_admin(
        Tenant(name=slug.title(), slug=slug),
        User(email=f"admin@{slug}.com", password_hash="x"),
    )


async def _admins(store, tenant) -> int:
    users = await store.list_tenant_users(tenant.id)
    return sum(1 for u in users if u.role == UserRole.ADMIN)


@pytest.mark.asyncio
async def test_last_admin_cannot_be_demoted_or_deleted(store):
    tenant, admin = await _seed(store, "acme")
    member = await store.add_user(User(tenant_id=tenant.id, email="m@acme.com", password_hash="x"))

    with pytest.raises(InvariantViolation):
        await store.set_user_role(tenant.id, admin.id, UserRole.MEMBER)
    with pytest.raises(InvariantViolation):
        await store.delete_user(tenant.id, admin.id)
    assert await _admins(store, tenant) == 1

    # Members are never the last admin
    assert await store.delete_user(tenant.id, member.id) == 0


@pytest.mark.asyncio
async def test_refused_delete_keeps_notes(store):
    tenant, admin = await _seed(store, "acme")
    await store.add_note(Note(tenant_id=tenant.id, author_id=admin.id, title="t", content="c"))

    with pytest.raises(InvariantViolation):
        await store.delete_user(tenant.id, admin.id)

    assert await store.count_notes(tenant.id) == 1
    assert await store.get_tenant_user(tenant.id, admin.id) is not None


@pytest.mark.asyncio
async def test_concurrent_demotions_leave_one_admin(store):
    tenant, first = await _seed(store, "acme")
    second = await store.add_user(
        User(tenant_id=tenant.id, email="second@acme.com", password_hash="x", role=UserRole.ADMIN)
    )

    results = await asyncio.gather(
        store.set_user_role(tenant.id, first.id, UserRole.MEMBER),
        store.set_user_role(tenant.id, second.id, UserRole.MEMBER),
        return_exceptions=True,
    )

    assert sum(isinstance(r, InvariantViolation) for r in results) == 1
    assert sum(isinstance(r, User) for r in results) == 1
    assert await _admins(store, tenant) == 1


@pytest.mark.asyncio
async def test_concurrent_admin_removals_leave_one_admin(store):
    tenant, first = await _seed(store, "acme")
    second = await store.add_user(
        User(tenant_id=tenant.id, email="second@acme.com", password_hash="x", role=UserRole.ADMIN)
    )

    results = await asyncio.gather(
        store.delete_user(tenant.id, first.id),
        store.delete_user(tenant.id, second.id),
        return_exceptions=True,
    )

    assert sum(isinstance(r, InvariantViolation) for r in results) == 1
    assert await _admins(store, tenant) == 1


@pytest.mark.asyncio
async def test_timestamps_are_timezone_aware(store):
    tenant, admin = await _seed(store, "acme")
    assert tenant.created_at.tzinfo is not None

    note = await store.add_note(Note(tenant_id=tenant.id, author_id=admin.id, title="t", content="c"))
    assert note.created_at.tzinfo is not None

    updated = await store.update_note(tenant.id, note.id, {"title": "renamed"})
    assert updated.updated_at.tzinfo is not None

    assert await store.count_notes(tenant.id, since=utcnow() - timedelta(days=30)) == 1
    assert await store.count_notes(tenant.id, since=utcnow() + timedelta(days=1)) == 0
