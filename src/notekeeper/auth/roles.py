"""Roles and the role guard.

Learn: require_role() builds a dependency that runs AFTER the access
guard and compares the identity it attached against the route's
allowed roles. It reads request.state rather than depending on
get_current_identity, so a route registered without the access guard
in front of it fails with GuardMisconfigured (500).
"""

from enum import Enum

from fastapi import Request

from notekeeper.errors import Forbidden, GuardMisconfigured


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


def require_role(*roles: UserRole):
    """Dependency factory: 403 unless the caller holds one of `roles`."""
    allowed = {r.value for r in roles}

    async def role_guard(request: Request) -> None:
        identity = getattr(request.state, "identity", None)
        if identity is None:
            raise GuardMisconfigured(
                "Role guard ran before the access guard attached an identity"
            )
        if identity.role not in allowed:
            raise Forbidden("Insufficient role")

    return role_guard
