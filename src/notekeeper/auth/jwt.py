"""Session token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A session token is issued once per Google login and lives for 7 days.
There is no refresh token and no server-side session store — when the
token expires, the client signs in with Google again.

The token carries exactly three identity claims (sub, email, role)
plus iat/exp. Nothing else goes in.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class TokenError(Exception):
    """Raised when token verification fails."""


class InvalidToken(TokenError):
    """Bad signature, malformed token, or missing/unknown claims."""


class TokenExpired(TokenError):
    """Signature is fine but the token is past its exp."""


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    email: str
    role: str


class TokenService:
    """Issues and verifies HS256 session tokens with a process-wide secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
        allowed_roles: tuple[str, ...] = ("user", "admin"),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self.allowed_roles = allowed_roles

    def issue(self, claims: SessionClaims, now: Optional[datetime] = None) -> str:
        """Sign a token for `claims`, valid for `lifetime` from `now`."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": claims.user_id,
            "email": claims.email,
            "role": claims.role,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionClaims:
        """Verify and decode a session token.

        Returns the embedded claims on success.
        Raises TokenExpired or InvalidToken on failure.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidToken(f"Invalid token: {e}")

        email = payload.get("email")
        role = payload.get("role")
        if not isinstance(email, str) or role not in self.allowed_roles:
            raise InvalidToken("Invalid token: missing identity claims")

        return SessionClaims(user_id=str(payload["sub"]), email=email, role=role)
