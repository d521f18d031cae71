"""
auth/errors.py -- Error taxonomy for account operations.

Every failure a caller can provoke by ordinary misuse is an AccountError
subclass. Each class carries the HTTP status, machine-readable code, and
client-facing message it maps to; api/main.py registers one exception handler
that turns any AccountError into the standard error envelope.

HashingError is not an AccountError: it signals a fault inside
bcrypt, not caller misuse, and falls through to the generic 500 handler.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AccountError(Exception):
    status_code: int = 400
    code: str = "account_error"
    message: str = "Request could not be completed."

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AccountError):
    status_code = 400
    code = "validation_error"
    message = "All fields are required."


class DuplicateEmailError(AccountError):
    status_code = 400
    code = "duplicate_email"
    message = "A user with that email already exists."


class UserNotFoundError(AccountError):
    status_code = 404
    code = "user_not_found"
    message = "User not found."


class WrongPasswordError(AccountError):
    status_code = 401
    code = "wrong_password"
    message = "Invalid password."


class MissingTokenError(AccountError):
    status_code = 401
    code = "missing_token"
    message = "Token not provided."


class InvalidTokenError(AccountError):
    """Token failed verification.

    reason is one of "malformed", "expired", "invalid_signature". It is kept
    for logging only: the status, code, and message are identical for every
    reason so callers cannot tell which check failed.
    """

    status_code = 403
    code = "invalid_token"
    message = "Invalid token."

    MALFORMED = "malformed"
    EXPIRED = "expired"
    INVALID_SIGNATURE = "invalid_signature"

    def __init__(self, reason: str) -> None:
        super().__init__()
        self.reason = reason


class NotFoundError(AccountError):
    status_code = 404
    code = "not_found"
    message = "User not found."


class HashingError(RuntimeError):
    """bcrypt failed to produce a digest. Unexpected; surfaces as a 500."""
