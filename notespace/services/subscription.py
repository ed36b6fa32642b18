"""Subscription gate: FREE tenants are capped, PRO tenants are not.

The limit check is read-then-decide: the count and the later insert are
separate store calls, so two concurrent creates at the boundary may both
pass. That transient overrun is accepted.
"""

import logging
import uuid
from datetime import timedelta

from notespace.core.errors import AlreadyOnPro, NotFound
from notespace.models.base import utcnow
from notespace.models.tenant import (
    UNLIMITED,
    SubscriptionTier,
    Tenant,
    TenantRead,
    TenantStats,
    TenantStatsRead,
    TenantUsageRead,
)
from notespace.services.policy import ensure_same_tenant
from notespace.services.principal import Principal
from notespace.services.store import NotesStore

logger = logging.getLogger(__name__)


class SubscriptionGate:
    def __init__(self, store: NotesStore, free_note_limit: int = 3) -> None:
        self._store = store
        self.free_note_limit = free_note_limit

    def note_limit(self, tier: SubscriptionTier) -> int:
        return UNLIMITED if tier == SubscriptionTier.PRO else self.free_note_limit

    async def can_create_note(self, tenant_id: uuid.UUID) -> bool:
        tenant = await self._require_tenant(tenant_id)
        if tenant.subscription_tier == SubscriptionTier.PRO:
            return True
        return await self._store.count_notes(tenant_id) < self.free_note_limit

    async def usage(self, tenant_id: uuid.UUID) -> TenantUsageRead:
        tenant = await self._require_tenant(tenant_id)
        return self._usage(tenant, await self._store.count_notes(tenant_id))

    async def upgrade(self, principal: Principal, tenant_slug: str) -> TenantUsageRead:
        """Move the caller's own tenant from FREE to PRO."""
        ensure_same_tenant(principal, tenant_slug)

        tenant = await self._require_tenant(principal.tenant_id)
        if tenant.subscription_tier == SubscriptionTier.PRO:
            raise AlreadyOnPro()

        updated = await self._store.set_subscription_tier(tenant.id, SubscriptionTier.PRO)
        if updated is None:
            raise NotFound("Tenant not found")

        logger.info("Tenant %s upgraded to pro by user %s", tenant.slug, principal.user_id)
        return self._usage(updated, await self._store.count_notes(tenant.id))

    async def stats(self, principal: Principal, tenant_slug: str) -> TenantStatsRead:
        ensure_same_tenant(principal, tenant_slug)

        tenant = await self._require_tenant(principal.tenant_id)
        note_count = await self._store.count_notes(tenant.id)
        recent = await self._store.count_notes(tenant.id, since=utcnow() - timedelta(days=30))
        limit = self.note_limit(tenant.subscription_tier)

        return TenantStatsRead(
            tenant=TenantRead.model_validate(tenant),
            stats=TenantStats(
                total_notes=note_count,
                total_users=await self._store.count_tenant_users(tenant.id),
                notes_last_30_days=recent,
                note_limit=limit,
                can_create_note=limit == UNLIMITED or note_count < limit,
            ),
        )

    # ── Internal helpers ──────────────────────────────────────

    async def _require_tenant(self, tenant_id: uuid.UUID) -> Tenant:
        tenant = await self._store.get_tenant(tenant_id)
        if tenant is None:
            raise NotFound("Tenant not found")
        return tenant

    def _usage(self, tenant: Tenant, note_count: int) -> TenantUsageRead:
        limit = self.note_limit(tenant.subscription_tier)
        return TenantUsageRead(
            **TenantRead.model_validate(tenant).model_dump(),
            note_count=note_count,
            note_limit=limit,
            can_create_note=limit == UNLIMITED or note_count < limit,
        )
