"""Sign-up, login and current-identity lookups."""

import logging
import re

from pydantic import BaseModel

from notespace.core.errors import Conflict, NotFound, Unauthenticated, ValidationError
from notespace.core.security import TokenService, hash_password, verify_password
from notespace.models.tenant import Tenant, TenantRead
from notespace.models.user import User, UserRead, UserRole
from notespace.services.principal import Principal
from notespace.services.store import NotesStore

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9\-]+$")
# Shape check only; reserved TLDs such as .test and .local are accepted
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")
SLUG_MAX_LENGTH = 100


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
    tenant: TenantRead


class MeResponse(BaseModel):
    user: UserRead
    tenant: TenantRead


def slugify(name: str) -> str:
    """Derive a URL-safe slug: lowercase, non-alphanumeric runs become '-'."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")[:SLUG_MAX_LENGTH].strip("-")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str) -> str:
    """Normalize ``email`` and reject anything without a single @."""
    email = normalize_email(email)
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("A valid email address is required")
    return email


async def register(
    store: NotesStore,
    tokens: TokenService,
    email: str,
    password: str,
    tenant_name: str,
    tenant_slug: str | None = None,
) -> SessionResponse:
    """Create a FREE tenant with the caller as its first admin."""
    tenant_name = tenant_name.strip()
    if not tenant_name:
        raise ValidationError("Tenant name is required")

    slug = tenant_slug.strip().lower() if tenant_slug else slugify(tenant_name)
    if not slug or not SLUG_PATTERN.match(slug) or len(slug) > SLUG_MAX_LENGTH:
        raise ValidationError("Tenant slug may only contain lowercase letters, digits and dashes")

    email = validate_email(email)
    if await store.get_tenant_by_slug(slug) is not None:
        raise Conflict(f"Slug '{slug}' is already taken")
    if await store.find_user_by_email(email) is not None:
        raise Conflict("A user with this email already exists")

    tenant, user = await store.create_tenant_with_admin(
        Tenant(name=tenant_name, slug=slug),
        User(email=email, password_hash=hash_password(password), role=UserRole.ADMIN),
    )
    logger.info("Registered tenant %s with admin %s", tenant.slug, user.id)

    return SessionResponse(
        access_token=tokens.issue(user.id, tenant.id, user.role),
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )


async def login(
    store: NotesStore,
    tokens: TokenService,
    email: str,
    password: str,
) -> SessionResponse:
    user = await store.find_user_by_email(normalize_email(email))
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", normalize_email(email))
        raise Unauthenticated("Invalid email or password")

    tenant = await store.get_tenant(user.tenant_id)
    if tenant is None:
        raise Unauthenticated("Tenant not found")

    return SessionResponse(
        access_token=tokens.issue(user.id, tenant.id, user.role),
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )


async def me(store: NotesStore, principal: Principal) -> MeResponse:
    user = await store.get_tenant_user(principal.tenant_id, principal.user_id)
    if user is None:
        raise NotFound("User not found")

    tenant = await store.get_tenant(principal.tenant_id)
    if tenant is None:
        raise NotFound("Tenant not found")

    return MeResponse(
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )
