"""ShareVault error hierarchy.

Services raise these; the exception handler in main.py turns them into a JSON
response with the mapped status. Credential failures all share one message so
a client cannot tell which part was wrong.
"""

from __future__ import annotations

GENERIC_CREDENTIAL_MESSAGE = "Invalid credentials"


class ShareVaultError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ShareVaultError):
    """Missing or malformed input."""

    status_code = 400
    default_message = "Invalid request"


class Unauthorized(ShareVaultError):
    """No credential presented."""

    status_code = 401
    default_message = "Not authenticated"


class InvalidToken(ShareVaultError):
    """Token is malformed, badly signed, expired or of an unknown kind."""

    status_code = 401

    def __init__(self, reason: str | None = None) -> None:
        # reason is for logs only
        super().__init__(GENERIC_CREDENTIAL_MESSAGE)
        self.reason = reason


class InvalidCredential(ShareVaultError):
    """Wrong username or password."""

    status_code = 401
    default_message = GENERIC_CREDENTIAL_MESSAGE


class Forbidden(ShareVaultError):
    status_code = 403
    default_message = "Access denied"


class NotFound(ShareVaultError):
    status_code = 404
    default_message = "Not found"


class Expired(ShareVaultError):
    """Share is past its expiry; checked independently of the password."""

    status_code = 410
    default_message = "Share expired"
