"""Auth service — Google login → user upsert → session token.

Learn: This is the only place the three auth components meet:
GoogleOAuthClient proves who the caller is, UserService turns that into
a local account, TokenService issues the bearer credential the client
uses from then on.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.google import GoogleOAuthClient
from notekeeper.auth.jwt import SessionClaims, TokenService
from notekeeper.errors import AuthenticationFailed
from notekeeper.schemas.auth import LoginResponse, LoginUser
from notekeeper.services.user_service import UserService

logger = structlog.get_logger()


class AuthService:
    def __init__(
        self,
        db: AsyncSession,
        google: GoogleOAuthClient,
        tokens: TokenService,
    ):
        self.users = UserService(db)
        self.google = google
        self.tokens = tokens

    async def google_login(self, code: str) -> LoginResponse:
        """Exchange a (normalized) authorization code for a session.

        Raises AuthenticationFailed if Google rejects or cannot be reached.
        No user is created or touched in that case.
        """
        try:
            identity = await self.google.exchange_code(code)
        except AuthenticationFailed as e:
            logger.warning("auth.login_failed", reason=e.reason)
            raise

        user = await self.users.find_or_create_from_identity(identity)
        token = self.tokens.issue(
            SessionClaims(user_id=str(user.id), email=user.email, role=user.role)
        )
        logger.info("auth.login", user_id=str(user.id), role=user.role)

        return LoginResponse(
            access_token=token,
            expires_in=f"{self.tokens.lifetime.days}d",
            user=LoginUser.model_validate(user),
        )
