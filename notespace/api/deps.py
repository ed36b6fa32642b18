"""FastAPI dependencies for authentication and shared services."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notespace.core.security import TokenService
from notespace.models.user import UserRole
from notespace.services import policy
from notespace.services.principal import Principal, resolve_principal
from notespace.services.store import NotesStore
from notespace.services.subscription import SubscriptionGate

# auto_error=False so a missing header is reported as 401, not 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> NotesStore:
    return request.app.state.store


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_subscription_gate(request: Request) -> SubscriptionGate:
    return request.app.state.gate


Store = Annotated[NotesStore, Depends(get_store)]
Tokens = Annotated[TokenService, Depends(get_token_service)]
Gate = Annotated[SubscriptionGate, Depends(get_subscription_gate)]


async def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    tokens: Tokens,
    store: Store,
) -> Principal:
    """Resolve the bearer token to a Principal with live role and tier."""
    raw = credentials.credentials if credentials else None
    return await resolve_principal(raw, tokens, store)


def require_role(min_role: UserRole):
    """Dependency factory: the resolved principal, if it meets ``min_role``."""

    async def _checker(
        principal: Annotated[Principal, Depends(get_principal)],
    ) -> Principal:
        policy.require_role(principal, min_role)
        return principal

    return _checker


# Typed shorthand for use in route signatures
CurrentPrincipal = Annotated[Principal, Depends(get_principal)]
MemberPrincipal = Annotated[Principal, Depends(require_role(UserRole.MEMBER))]
AdminPrincipal = Annotated[Principal, Depends(require_role(UserRole.ADMIN))]
