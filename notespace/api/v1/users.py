"""Users management: tenant-scoped, restricted to admins."""

import uuid

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from notespace.api.deps import AdminPrincipal, Store
from notespace.models.user import UserDetail, UserInvited, UserRead, UserRole, UserRoleUpdate
from notespace.services import users

router = APIRouter(prefix="/users", tags=["users"])


class InviteRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    role: UserRole = UserRole.MEMBER


class UserRemoved(BaseModel):
    message: str
    user_id: uuid.UUID


@router.get("", response_model=list[UserRead])
async def list_users(principal: AdminPrincipal, store: Store) -> list[UserRead]:
    return await users.list_users(store, principal)


@router.post("/invite", response_model=UserInvited, status_code=status.HTTP_201_CREATED)
async def invite_user(body: InviteRequest, principal: AdminPrincipal, store: Store) -> UserInvited:
    """Create a user with a temporary password. No email is sent."""
    return await users.invite_user(store, principal, email=body.email, role=body.role)


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(user_id: uuid.UUID, principal: AdminPrincipal, store: Store) -> UserDetail:
    return await users.get_user(store, principal, user_id)


@router.put("/{user_id}/role", response_model=UserRead)
async def update_user_role(
    user_id: uuid.UUID,
    body: UserRoleUpdate,
    principal: AdminPrincipal,
    store: Store,
) -> UserRead:
    return await users.update_role(store, principal, user_id, body.role)


@router.delete("/{user_id}", response_model=UserRemoved)
async def remove_user(user_id: uuid.UUID, principal: AdminPrincipal, store: Store) -> UserRemoved:
    return UserRemoved(**await users.remove_user(store, principal, user_id))
