"""Auth API — Google sign-in and token checks.

Learn: Routes for the login flow:
- GET /auth/google → consent screen URL for the frontend to redirect to
- POST /auth/google/callback → authorization code → session token
- GET /auth/profile → identity carried by the current token
- POST /auth/validate → cheap "is my token still good?" check

The first two are open; the last two run the access guard themselves.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.dependencies import (
    CurrentIdentity,
    get_current_identity,
    get_token_service,
)
from notekeeper.auth.google import GoogleOAuthClient, normalize_code
from notekeeper.auth.jwt import TokenService
from notekeeper.db.engine import get_db
from notekeeper.errors import MissingAuthorizationCode
from notekeeper.schemas.auth import (
    AuthUrlResponse,
    LoginResponse,
    TokenValid,
    parse_callback,
)
from notekeeper.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def get_google_client(request: Request) -> GoogleOAuthClient:
    return request.app.state.google


def _svc(
    db: AsyncSession = Depends(get_db),
    google: GoogleOAuthClient = Depends(get_google_client),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, google, tokens)


# ─── Google login ───────────────────────────────────────


@router.get("/google", response_model=AuthUrlResponse)
async def google_auth_url(google: GoogleOAuthClient = Depends(get_google_client)):
    """Return the Google consent URL."""
    return AuthUrlResponse(auth_url=google.auth_url())


@router.post("/google/callback", response_model=LoginResponse)
async def google_callback(
    payload: Any = Body(None),
    svc: AuthService = Depends(_svc),
):
    """Exchange Google's authorization code for a session token."""
    result = parse_callback(payload)
    if not result.ok:
        raise MissingAuthorizationCode()

    return await svc.google_login(normalize_code(result.value.code))


# ─── Current token ──────────────────────────────────────


@router.get("/profile")
async def get_profile(identity: CurrentIdentity = Depends(get_current_identity)):
    """Identity embedded in the caller's token (no database lookup)."""
    return {"user": identity.to_dict()}


@router.post("/validate", response_model=TokenValid)
async def validate_token(identity: CurrentIdentity = Depends(get_current_identity)):
    return TokenValid()
