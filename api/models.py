"""
API request and response models for the account service REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

UserResponse has no password field at all, so no route can leak a hash by
accident -- the mapping from User simply has nowhere to put it.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from auth.models import User
from auth.tokens import MAX_PASSWORD_BYTES

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Names and emails are stripped before the length check, so "   " is empty.
# Passwords are taken byte-for-byte; leading or trailing spaces are significant.
_Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
_Password = Annotated[str, Field(min_length=1)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /users.

    The password limit is counted in UTF-8 bytes, not characters: 40 accented
    letters are 80 bytes and would not fit in bcrypt.
    """

    name: _Text
    email: _Text
    password: _Password

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded.")
        return value


class LoginRequest(BaseModel):
    """Request body for POST /login.

    No upper bound on the password: an overlong one simply fails to match, so
    the caller still gets 404 or 401 rather than a validation error.
    """

    email: _Text
    password: _Password


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Build a UserResponse from a domain User, dropping hashed_password."""
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class RegisterResponse(BaseModel):
    """Response for POST /users (201)."""

    model_config = ConfigDict(frozen=True)

    message: str = "User created."
    user: UserResponse


class LoginResponse(BaseModel):
    """Response for POST /login (200)."""

    model_config = ConfigDict(frozen=True)

    message: str = "Login successful."
    token: str
    token_type: str = "bearer"
    expires_in: int


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
