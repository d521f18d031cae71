"""
auth/models.py -- Domain dataclasses for account entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; the store, service, and routes do the work.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is unique across all users (enforced by the store's UNIQUE
    constraint). hashed_password is write-only from the service's point of
    view: it is read for login verification and never serialised into an API
    response. There is no update path -- records are created by register and
    destroyed by delete.
    """

    name: str
    email: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class TokenIdentity:
    """The identity carried by a verified bearer token.

    Attached to request.state.identity by the auth gate. The user it names may
    have been deleted since the token was issued -- tokens are not revoked.
    """

    user_id: int
    email: str
