"""Import all models so SQLModel.metadata picks them up."""

from notespace.models.note import (
    Note,
    NoteAuthor,
    NoteCreate,
    NoteDeleted,
    NoteList,
    NotePinRead,
    NoteRead,
    NoteRecommendation,
    NoteUpdate,
    Pagination,
)
from notespace.models.tenant import (
    SubscriptionTier,
    Tenant,
    TenantRead,
    TenantStats,
    TenantStatsRead,
    TenantUsageRead,
)
from notespace.models.user import User, UserDetail, UserInvited, UserRead, UserRole, UserRoleUpdate

__all__ = [
    "Note",
    "NoteAuthor",
    "NoteCreate",
    "NoteDeleted",
    "NoteList",
    "NotePinRead",
    "NoteRead",
    "NoteRecommendation",
    "NoteUpdate",
    "Pagination",
    "SubscriptionTier",
    "Tenant",
    "TenantRead",
    "TenantStats",
    "TenantStatsRead",
    "TenantUsageRead",
    "User",
    "UserDetail",
    "UserInvited",
    "UserRead",
    "UserRole",
    "UserRoleUpdate",
]
