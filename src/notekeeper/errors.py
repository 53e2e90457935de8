"""Error taxonomy shared by services, guards, and routes.

Learn: Every failure the API can report is one of these classes. Each
carries the HTTP status it maps to, so the boundary mapper in
api/errors.py needs no per-class knowledge. Services raise them at the
point of detection and nothing in between catches them.
"""

from typing import Union


class NotekeeperError(Exception):
    """Base class. `message` is what the client sees."""

    status_code: int = 500

    def __init__(self, message: Union[str, list[str]] = "Internal server error"):
        self.message = message
        super().__init__(message if isinstance(message, str) else "; ".join(message))


# ─── 400 ────────────────────────────────────────────────


class ValidationFailed(NotekeeperError):
    """Malformed input: bad id, empty required field, wrong type, unknown field."""

    status_code = 400

    def __init__(self, message: Union[str, list[str]] = "Validation failed"):
        super().__init__(message)


class InvalidId(ValidationFailed):
    def __init__(self, resource: str = "resource"):
        super().__init__(f"Invalid {resource} ID")


class InvalidRole(ValidationFailed):
    def __init__(self):
        super().__init__('Invalid role. Must be "user" or "admin"')


class SelfDeletion(ValidationFailed):
    def __init__(self):
        super().__init__("You cannot delete your own account")


class MissingAuthorizationCode(ValidationFailed):
    def __init__(self):
        super().__init__("Authorization code is required")


# ─── 401 ────────────────────────────────────────────────


class Unauthenticated(NotekeeperError):
    """Missing, invalid, or expired session token."""

    status_code = 401

    def __init__(self, message: str = "Missing or invalid token"):
        super().__init__(message)


class AuthenticationFailed(Unauthenticated):
    """The identity provider could not be reached or rejected the login."""

    def __init__(self, reason: str = "Authentication failed"):
        self.reason = reason
        super().__init__(reason)


# ─── 403 / 404 ──────────────────────────────────────────


class Forbidden(NotekeeperError):
    status_code = 403

    def __init__(self, message: str = "Insufficient role"):
        super().__init__(message)


class NotFound(NotekeeperError):
    """Absent, or owned by someone else — the two are indistinguishable."""

    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


# ─── 500 ────────────────────────────────────────────────


class GuardMisconfigured(NotekeeperError):
    """A role check ran on a route without the access guard in front of it."""

    status_code = 500


class ProviderNotConfigured(NotekeeperError):
    status_code = 500

    def __init__(self):
        super().__init__("Google OAuth is not properly configured")
