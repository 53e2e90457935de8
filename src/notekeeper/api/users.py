"""User administration routes (admin only).

Learn: The access guard and the admin role guard are both applied when
this router is mounted (see api/__init__.py), in that order. Handlers
that need the caller's identity re-declare get_current_identity;
FastAPI caches it per request so the token is verified once.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.dependencies import CurrentIdentity, get_current_identity
from notekeeper.auth.roles import UserRole
from notekeeper.db.engine import get_db
from notekeeper.schemas.user import (
    DeletedUser,
    UserDeleted,
    UserRead,
    parse_role_change,
)
from notekeeper.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("", response_model=list[UserRead])
async def list_users(svc: UserService = Depends(_svc)):
    """All users, newest first."""
    return await svc.list_users()


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: str, svc: UserService = Depends(_svc)):
    return await svc.get_user(user_id)


# ─── Role changes ───────────────────────────────────────


@router.put("/{user_id}/make-admin", response_model=UserRead)
async def make_admin(user_id: str, svc: UserService = Depends(_svc)):
    return await svc.set_role(user_id, UserRole.ADMIN.value)


@router.put("/{user_id}/make-regular", response_model=UserRead)
async def make_regular(user_id: str, svc: UserService = Depends(_svc)):
    return await svc.set_role(user_id, UserRole.USER.value)


@router.put("/{user_id}/role", response_model=UserRead)
async def change_role(
    user_id: str,
    payload: Any = Body(None),
    svc: UserService = Depends(_svc),
):
    """Set the role from a body like {"role": "admin"}."""
    body = parse_role_change(payload).unwrap()
    return await svc.set_role(user_id, body.role)


# ─── Delete ─────────────────────────────────────────────


@router.delete("/{user_id}", response_model=UserDeleted)
async def delete_user(
    user_id: str,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: UserService = Depends(_svc),
):
    """Delete a user. 400 if an admin targets their own account."""
    deleted = await svc.delete_user(user_id, requested_by=identity.user_id)
    return UserDeleted(deleted_user=DeletedUser(**deleted))
