"""FastAPI auth dependencies — the access guard.

Learn: get_current_identity is used as Depends() on every protected
router. It pulls the Bearer token from the Authorization header,
verifies it with the app's TokenService, and attaches the decoded
identity to request.state for downstream guards and handlers.

It is a pure gate: no database lookup. A user deleted after login keeps
a working token until it expires.
"""

import uuid
from typing import Optional

import structlog
from fastapi import Header, Request

from notekeeper.auth.jwt import TokenExpired, TokenError, TokenService
from notekeeper.errors import Unauthenticated

logger = structlog.get_logger()


class CurrentIdentity:
    """The authenticated caller, as stated by their session token."""

    def __init__(self, user_id: str, email: str, role: str):
        self.user_id = user_id
        self.user_uuid = uuid.UUID(user_id)
        self.email = email
        self.role = role

    def to_dict(self) -> dict:
        return {"id": self.user_id, "email": self.email, "role": self.role}


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credential = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credential.strip():
        return None
    return credential.strip()


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Require a valid session token (401 otherwise)."""
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthenticated("Missing or invalid token")

    try:
        claims = get_token_service(request).verify(token)
    except TokenExpired:
        logger.info("auth.token_expired", path=request.url.path)
        raise Unauthenticated("Invalid or expired token")
    except TokenError as e:
        logger.warning("auth.token_invalid", path=request.url.path, error=str(e))
        raise Unauthenticated("Invalid or expired token")

    try:
        identity = CurrentIdentity(
            user_id=claims.user_id, email=claims.email, role=claims.role
        )
    except ValueError:
        logger.warning("auth.token_invalid", path=request.url.path, error="bad subject")
        raise Unauthenticated("Invalid or expired token")

    request.state.identity = identity
    return identity
