"""User service — the user directory.

Learn: Users are never registered explicitly. The first Google login for
an email creates the account with role "user"; every later login
refreshes name/picture/external_id from Google. Everything else here is
admin-only: listing, lookups, role changes, deletion.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.google import ExternalIdentity
from notekeeper.auth.roles import UserRole
from notekeeper.db.models import User
from notekeeper.errors import InvalidId, InvalidRole, NotFound, SelfDeletion

logger = structlog.get_logger()


def parse_user_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise InvalidId("user")


def _apply_profile(user: User, identity: ExternalIdentity) -> None:
    user.name = identity.name
    user.picture = identity.picture
    user.external_id = identity.external_id


def _same_user(a: str, b: str) -> bool:
    try:
        return uuid.UUID(str(a)) == uuid.UUID(str(b))
    except ValueError:
        return a == b


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Login ──────────────────────────────────────────

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_or_create_from_identity(self, identity: ExternalIdentity) -> User:
        """Upsert by email and refresh profile fields. Returns the refreshed user."""
        user = await self.get_by_email(identity.email)
        if user is None:
            user = User(email=identity.email, role=UserRole.USER.value)
            self.db.add(user)
            logger.info("users.created", email=identity.email)
        _apply_profile(user, identity)

        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent first login inserted the same email
            await self.db.rollback()
            user = await self.get_by_email(identity.email)
            if user is None:
                raise
            logger.info("users.login_race", email=identity.email)
            _apply_profile(user, identity)
            await self.db.commit()
        return user

    # ─── Admin ──────────────────────────────────────────

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    async def get_user(self, user_id: str) -> User:
        user = await self.get_by_id(parse_user_id(user_id))
        if user is None:
            raise NotFound("User")
        return user

    async def set_role(self, user_id: str, role: str) -> User:
        uid = parse_user_id(user_id)
        try:
            new_role = UserRole(role)
        except ValueError:
            raise InvalidRole()

        user = await self.get_by_id(uid)
        if user is None:
            raise NotFound("User")

        if user.role != new_role.value:
            logger.info(
                "users.role_changed",
                user_id=str(uid),
                old_role=user.role,
                new_role=new_role.value,
            )
        user.role = new_role.value
        await self.db.commit()
        return user

    async def delete_user(self, user_id: str, requested_by: str) -> dict:
        """Delete a user. Admins cannot delete themselves.

        The self-check runs before id validation or lookup, so it holds
        even when the admin's own row does not exist.
        """
        if _same_user(user_id, requested_by):
            raise SelfDeletion()

        user = await self.get_by_id(parse_user_id(user_id))
        if user is None:
            raise NotFound("User")

        summary = {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
        }
        await self.db.delete(user)
        await self.db.commit()

        logger.info("users.deleted", user_id=user_id, deleted_by=requested_by)
        return summary
