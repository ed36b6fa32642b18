"""User management within the caller's tenant. Callers must already be admins."""

import logging
import secrets
import uuid

from notespace.core.errors import Conflict, NotFound
from notespace.core.security import hash_password
from notespace.models.user import User, UserDetail, UserInvited, UserRead, UserRole
from notespace.services.accounts import validate_email
from notespace.services.principal import Principal
from notespace.services.store import NotesStore

logger = logging.getLogger(__name__)


async def list_users(store: NotesStore, principal: Principal) -> list[UserRead]:
    users = await store.list_tenant_users(principal.tenant_id)
    return [UserRead.model_validate(u) for u in users]


async def get_user(store: NotesStore, principal: Principal, user_id: uuid.UUID) -> UserDetail:
    user = await _get_or_404(store, principal, user_id)
    note_count = await store.count_notes(principal.tenant_id, author_id=user.id)
    return UserDetail(**UserRead.model_validate(user).model_dump(), note_count=note_count)


async def invite_user(
    store: NotesStore,
    principal: Principal,
    email: str,
    role: UserRole = UserRole.MEMBER,
) -> UserInvited:
    """Create the account directly; no email is sent.

    The temporary password is returned once and never stored in plain text.
    """
    email = validate_email(email)
    if await store.find_user_by_email(email) is not None:
        raise Conflict("A user with this email already exists")

    temporary_password = secrets.token_urlsafe(12)
    user = await store.add_user(User(
        tenant_id=principal.tenant_id,
        email=email,
        password_hash=hash_password(temporary_password),
        role=role,
    ))
    logger.info("User %s invited to tenant %s as %s", user.id, principal.tenant_slug, role)

    return UserInvited(
        **UserRead.model_validate(user).model_dump(),
        temporary_password=temporary_password,
    )


async def update_role(
    store: NotesStore,
    principal: Principal,
    user_id: uuid.UUID,
    role: UserRole,
) -> UserRead:
    await _get_or_404(store, principal, user_id)
    # The store refuses to demote the last admin within the same transaction
    updated = await store.set_user_role(principal.tenant_id, user_id, role)
    if updated is None:
        raise NotFound("User not found")
    return UserRead.model_validate(updated)


async def remove_user(store: NotesStore, principal: Principal, user_id: uuid.UUID) -> dict:
    """Delete a user and cascade-delete their notes. The last admin cannot be removed."""
    await _get_or_404(store, principal, user_id)
    removed_notes = await store.delete_user(principal.tenant_id, user_id)
    if removed_notes is None:
        raise NotFound("User not found")

    logger.info(
        "User %s removed from tenant %s (%d notes deleted)",
        user_id, principal.tenant_slug, removed_notes,
    )
    return {"message": "User removed successfully", "user_id": str(user_id)}


# ── Internal helper ───────────────────────────────────────────

async def _get_or_404(store: NotesStore, principal: Principal, user_id: uuid.UUID) -> User:
    user = await store.get_tenant_user(principal.tenant_id, user_id)
    if user is None:
        raise NotFound("User not found")
    return user
