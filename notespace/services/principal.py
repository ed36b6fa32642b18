"""Principal resolution: bearer token -> live identity for one request."""

import logging
import uuid

from notespace.core.errors import Unauthenticated
from notespace.core.security import ExpiredToken, TokenError, TokenService
from notespace.models.tenant import SubscriptionTier
from notespace.models.user import UserRole
from notespace.services.store import NotesStore

logger = logging.getLogger(__name__)


class Principal:
    """Resolved identity carried through a request."""

    __slots__ = ("user_id", "tenant_id", "role", "tenant_slug", "subscription_tier", "email")

    def __init__(
        self,
        user_id: uuid.UUID,
        tenant_id: uuid.UUID,
        role: UserRole,
        tenant_slug: str,
        subscription_tier: SubscriptionTier,
        email: str = "",
    ) -> None:
        self.user_id = user_id
        self.tenant_id = tenant_id
        self.role = role
        self.tenant_slug = tenant_slug
        self.subscription_tier = subscription_tier
        self.email = email

    def __repr__(self) -> str:
        return f"Principal(user_id={self.user_id}, tenant={self.tenant_slug}, role={self.role})"


async def resolve_principal(
    token: str | None,
    tokens: TokenService,
    store: NotesStore,
) -> Principal:
    """Turn a bearer token into a Principal built from current store state.

    The token is trusted for identity only. Role, tenant and subscription
    tier are re-read on every call, so a demotion, upgrade or deletion takes
    effect on the very next request. Tokens are not revocable; the user
    lookup is what makes deletion stick.
    """
    if not token:
        raise Unauthenticated("Access token required")

    try:
        claims = tokens.verify(token)
    except ExpiredToken as exc:
        raise Unauthenticated("Token expired") from exc
    except TokenError as exc:
        raise Unauthenticated("Invalid token") from exc

    user = await store.get_user(claims.user_id)
    if user is None:
        logger.info("Rejected token for missing user %s", claims.user_id)
        raise Unauthenticated("Invalid token - user not found")

    tenant = await store.get_tenant(user.tenant_id)
    if tenant is None:
        raise Unauthenticated("Invalid token - tenant not found")

    return Principal(
        user_id=user.id,
        tenant_id=tenant.id,
        role=user.role,
        tenant_slug=tenant.slug,
        subscription_tier=tenant.subscription_tier,
        email=user.email,
    )
