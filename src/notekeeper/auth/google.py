"""Google OAuth 2.0 identity exchange.

Learn: The authorization-code flow has two legs on the server side:
1. POST the code to Google's token endpoint → access token
2. GET the userinfo endpoint with that access token → profile

Every failure along the way (network error, non-2xx, missing token,
unverified email) becomes AuthenticationFailed. Callers cannot tell
"Google was unreachable" from "Google said no", and raw transport errors
never reach the API client.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlencode

import httpx
import structlog

from notekeeper.config import Settings
from notekeeper.errors import AuthenticationFailed, ProviderNotConfigured

logger = structlog.get_logger()

_ENCODED_SLASH = re.compile(r"%2F", re.IGNORECASE)


@dataclass(frozen=True)
class ExternalIdentity:
    """A Google profile whose email Google has verified."""

    email: str
    name: str
    picture: Optional[str]
    external_id: str
    verified_email: bool = True


def normalize_code(raw: str) -> str:
    """URL-decode an authorization code.

    Codes are often double-encoded by the frontend; any `%2F` left after
    one decode pass is restored to a literal slash.
    """
    return _ENCODED_SLASH.sub("/", unquote(raw))


def _error_reason(exc: httpx.HTTPError, fallback: str) -> str:
    """Pull Google's error_description out of a failed response, if any."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("error_description") or body.get("error")
            if isinstance(detail, dict):
                detail = detail.get("message")
            if detail:
                return str(detail)
    return str(exc) or fallback


class GoogleOAuthClient:
    """Trades authorization codes for verified Google identities."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http: httpx.AsyncClient,
        *,
        auth_endpoint: str = "https://accounts.google.com/o/oauth2/v2/auth",
        token_endpoint: str = "https://oauth2.googleapis.com/token",
        userinfo_endpoint: str = "https://www.googleapis.com/oauth2/v2/userinfo",
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.http = http
        self.auth_endpoint = auth_endpoint
        self.token_endpoint = token_endpoint
        self.userinfo_endpoint = userinfo_endpoint

    @classmethod
    def from_settings(
        cls, settings: Settings, http: Optional[httpx.AsyncClient] = None
    ) -> "GoogleOAuthClient":
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_callback_url,
            http=http or httpx.AsyncClient(timeout=settings.google_timeout_seconds),
            auth_endpoint=settings.google_auth_endpoint,
            token_endpoint=settings.google_token_endpoint,
            userinfo_endpoint=settings.google_userinfo_endpoint,
        )

    def auth_url(self) -> str:
        """Build the Google consent screen URL."""
        if not self.client_id or not self.redirect_uri:
            logger.error("google.not_configured")
            raise ProviderNotConfigured()

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "email profile",
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{self.auth_endpoint}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> ExternalIdentity:
        """Exchange an authorization code for a verified identity.

        Raises AuthenticationFailed on any failure.
        """
        tokens = await self._fetch_tokens(code)
        access_token = tokens.get("access_token") if isinstance(tokens, dict) else None
        if not access_token:
            raise AuthenticationFailed("Google did not return an access token")

        profile = await self._fetch_userinfo(access_token)
        if not isinstance(profile, dict):
            raise AuthenticationFailed("Failed to fetch user info from Google")
        if profile.get("verified_email") is not True:
            raise AuthenticationFailed("Google email not verified")
        if not profile.get("email"):
            raise AuthenticationFailed("Google did not return an email address")

        return ExternalIdentity(
            email=profile["email"],
            name=profile.get("name") or "",
            picture=profile.get("picture"),
            external_id=str(profile.get("id", "")),
        )

    async def _fetch_tokens(self, code: str) -> dict:
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }
        try:
            response = await self.http.post(self.token_endpoint, data=form)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            reason = _error_reason(e, "Failed to exchange code for tokens")
            logger.warning("google.token_exchange_failed", reason=reason)
            raise AuthenticationFailed(reason)
        except ValueError:
            logger.warning("google.token_exchange_failed", reason="non-JSON body")
            raise AuthenticationFailed("Failed to exchange code for tokens")

    async def _fetch_userinfo(self, access_token: str) -> dict:
        try:
            response = await self.http.get(
                self.userinfo_endpoint,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            reason = _error_reason(e, "Failed to fetch user info from Google")
            logger.warning("google.userinfo_failed", reason=reason)
            raise AuthenticationFailed(reason)
        except ValueError:
            logger.warning("google.userinfo_failed", reason="non-JSON body")
            raise AuthenticationFailed("Failed to fetch user info from Google")

    async def aclose(self) -> None:
        await self.http.aclose()
