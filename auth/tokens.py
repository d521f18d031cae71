"""
auth/tokens.py -- Password hashing and JWT issue/verify utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with Settings.secret_key and
       carry user_id, email, iat, and exp. Verification raises
       InvalidTokenError with an internal reason (malformed, expired,
       invalid_signature); the route layer reports all three identically.

  Passwords: bcrypt used directly. The work factor is Settings.bcrypt_rounds
       (10 by default), fixed for the life of the process. Each hash gets a
       fresh random salt, so hashing the same password twice yields two
       different digests.

  Settings: every function that needs the signing secret takes the Settings
       instance as an argument. Nothing here reads configuration at import time.

Layer rule: no imports from api/. Import from core/ is allowed -- core/ is the
kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from auth.errors import HashingError, InvalidTokenError
from auth.models import TokenIdentity

if TYPE_CHECKING:
    from core.config import Settings

logger = logging.getLogger("accountsvc.auth")

_ALGORITHM = "HS256"

# bcrypt hashes at most 72 bytes of input; bcrypt 5.x raises beyond that.
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = 10) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt rejects inputs longer than MAX_PASSWORD_BYTES on current releases.
    Callers validate the UTF-8 length first (RegisterRequest, AccountService);
    anything that still fails inside bcrypt is wrapped in HashingError.
    """
    try:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")
    except (ValueError, TypeError) as exc:
        raise HashingError(f"bcrypt could not hash password: {exc}") from exc


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch, never an error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, email: str, settings: Settings, expire_seconds: int = 0) -> str:
    """Encode a signed JWT with user identity and expiry.

    Args:
        user_id:        Numeric user ID stored in the DB.
        email:          The user's email at issue time.
        settings:       Supplies the signing secret and default lifetime.
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds (one hour).
    """
    duration = expire_seconds if expire_seconds > 0 else settings.token_expire_seconds
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=duration),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> TokenIdentity:
    """Verify a JWT and return the identity it carries.

    Raises InvalidTokenError with reason:
      malformed          -- not a decodable JWT, or required claims missing
      expired            -- signature valid but exp is in the past
      invalid_signature  -- signed with another key or tampered with

    jose checks the signature before the claims, so a tampered token that is
    also expired reports invalid_signature.
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise InvalidTokenError(InvalidTokenError.MALFORMED) from exc

    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise InvalidTokenError(InvalidTokenError.EXPIRED) from exc
    except JWTError as exc:
        raise InvalidTokenError(InvalidTokenError.INVALID_SIGNATURE) from exc

    user_id = payload.get("user_id")
    email = payload.get("email")
    if not isinstance(user_id, int) or not isinstance(email, str):
        raise InvalidTokenError(InvalidTokenError.MALFORMED)
    return TokenIdentity(user_id=user_id, email=email)
