"""Authorization gates evaluated server-side on every mutation.

Tenant isolation itself lives in the store: every scoped query filters by
the principal's tenant, so a foreign row simply comes back as missing and
surfaces as NotFound. The last-admin rule is enforced by the store inside
the write transaction.
"""

from notespace.core.errors import Forbidden
from notespace.models.note import Note
from notespace.models.user import ROLE_RANK, UserRole
from notespace.services.principal import Principal


def has_role(principal: Principal, min_role: UserRole) -> bool:
    return ROLE_RANK.get(principal.role, 0) >= ROLE_RANK[min_role]


def require_role(principal: Principal, min_role: UserRole) -> None:
    if not has_role(principal, min_role):
        if min_role == UserRole.ADMIN:
            raise Forbidden("Admin access required")
        raise Forbidden("Member access or higher required")


def ensure_author(principal: Principal, note: Note, action: str = "modify") -> None:
    """Only the author may mutate a note. Admins get no override."""
    if note.author_id != principal.user_id:
        raise Forbidden(f"Access denied - you can only {action} your own notes")


def ensure_same_tenant(principal: Principal, tenant_slug: str) -> None:
    if tenant_slug != principal.tenant_slug:
        raise Forbidden("Access denied - you can only manage your own tenant")
