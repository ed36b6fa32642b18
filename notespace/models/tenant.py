"""Tenant model: top-level isolation boundary and billing unit."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from notespace.models.base import TimestampMixin, new_uuid

UNLIMITED = -1


class SubscriptionTier(StrEnum):
    FREE = "free"
    PRO = "pro"


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    # Assigned once at registration, never changed afterwards
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    subscription_tier: SubscriptionTier = Field(default=SubscriptionTier.FREE)


# ── Pydantic schemas ─────────────────────────────────────────

class TenantRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    subscription_tier: SubscriptionTier
    created_at: datetime


class TenantUsageRead(TenantRead):
    """Tenant plus the numbers behind the note-limit gate."""
    note_count: int
    note_limit: int = Field(description="-1 means unlimited")
    can_create_note: bool


class TenantStats(SQLModel):
    total_notes: int
    total_users: int
    notes_last_30_days: int
    note_limit: int
    can_create_note: bool


class TenantStatsRead(SQLModel):
    tenant: TenantRead
    stats: TenantStats
