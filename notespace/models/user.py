"""User model: belongs to exactly one tenant."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from notespace.models.base import TimestampMixin, new_uuid


class UserRole(StrEnum):
    ADMIN = "admin"
    MEMBER = "member"


# Higher rank includes every capability of the lower ones
ROLE_RANK = {
    UserRole.MEMBER: 1,
    UserRole.ADMIN: 2,
}


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    # Stored lowercased; unique across tenants so login can look it up globally
    email: str = Field(max_length=320, unique=True, nullable=False, index=True)
    password_hash: str = Field(nullable=False)
    role: UserRole = Field(default=UserRole.MEMBER)


# ── Pydantic schemas ─────────────────────────────────────────

class UserRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    email: str
    role: UserRole
    created_at: datetime


class UserDetail(UserRead):
    note_count: int


class UserInvited(UserRead):
    """Returned exactly once at invite time, including the temporary password."""
    temporary_password: str


class UserRoleUpdate(SQLModel):
    role: UserRole
