"""Tenant info, plan upgrade and stats."""

from fastapi import APIRouter

from notespace.api.deps import AdminPrincipal, CurrentPrincipal, Gate
from notespace.models.tenant import TenantStatsRead, TenantUsageRead

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.get(
    "/current",
    response_model=TenantUsageRead,
    summary="Get current tenant info with note usage",
)
async def get_current_tenant(principal: CurrentPrincipal, gate: Gate) -> TenantUsageRead:
    return await gate.usage(principal.tenant_id)


@router.post(
    "/{slug}/upgrade",
    response_model=TenantUsageRead,
    summary="Upgrade the caller's own tenant to Pro",
)
async def upgrade_tenant(slug: str, principal: AdminPrincipal, gate: Gate) -> TenantUsageRead:
    return await gate.upgrade(principal, slug)


@router.get("/{slug}/stats", response_model=TenantStatsRead)
async def get_tenant_stats(slug: str, principal: AdminPrincipal, gate: Gate) -> TenantStatsRead:
    return await gate.stats(principal, slug)
