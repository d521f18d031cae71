"""
auth/service.py -- AccountService: register, login, list, delete, who-am-i.

Each operation is an independent unit of work against UserStore. There is no
transaction spanning operations, no caching, and no retry: every failure is
raised immediately as an AccountError subclass (see auth/errors.py) and the
HTTP layer maps it to a status code.

Authorization note: delete_user() has no ownership check. Any caller that
passed the auth gate may delete any user by id. This matches the behaviour of
the service this one replaces and is flagged in DESIGN.md as a likely gap.

Layer rule: no imports from api/. FastAPI is not imported here so the service
can be driven from the CLI as well as from routes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateEmailError, NotFoundError, UserNotFoundError, ValidationError, WrongPasswordError
from auth.models import TokenIdentity, User
from auth.tokens import MAX_PASSWORD_BYTES, create_access_token, hash_password, verify_password

if TYPE_CHECKING:
    from auth.store import UserStore
    from core.config import Settings

logger = logging.getLogger("accountsvc.auth")


def _require_fields(**fields: str | None) -> None:
    missing = [name for name, value in fields.items() if value is None or not str(value).strip()]
    if missing:
        raise ValidationError(detail=f"Missing or empty: {', '.join(missing)}")


class AccountService:
    """Orchestrates the store, the password hasher, and the token issuer.

    Usage:
        service = AccountService(UserStore(url), settings)
        user = service.register("Ana", "ana@x.com", "secret1")
        token, _ = service.login("ana@x.com", "secret1")
    """

    def __init__(self, store: UserStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    def register(self, name: str, email: str, password: str) -> User:
        """Create a user. Raises ValidationError or DuplicateEmailError.

        The returned User carries the generated id and the stored hash; callers
        must not serialise hashed_password.
        """
        _require_fields(name=name, email=email, password=password)
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                "Password is too long.",
                detail=f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded.",
            )
        user = User(
            name=name.strip(),
            email=email.strip(),
            hashed_password=hash_password(password, rounds=self.settings.bcrypt_rounds),
        )
        try:
            user_id = self.store.create_user(user)
        except IntegrityError as exc:
            raise DuplicateEmailError() from exc

        created = self.store.get_by_id(user_id)
        if created is None:
            raise RuntimeError(f"User {user_id} not found after insert")
        logger.info("Registered user id=%s", created.id)
        return created

    def login(self, email: str, password: str) -> tuple[str, User]:
        """Verify credentials and issue a bearer token.

        Raises UserNotFoundError for an unknown email and WrongPasswordError
        for a bad password.
        """
        _require_fields(email=email, password=password)
        user = self.store.get_by_email(email.strip())
        if user is None:
            raise UserNotFoundError()
        if not verify_password(password, user.hashed_password):
            logger.info("Failed login for user id=%s", user.id)
            raise WrongPasswordError()

        token = create_access_token(user.id, user.email, self.settings)
        logger.info("Issued token for user id=%s", user.id)
        return token, user

    def list_users(self) -> list[User]:
        return self.store.list_users()

    def delete_user(self, user_id: int, caller: TokenIdentity | None = None) -> None:
        """Delete the user with user_id. Raises NotFoundError if none was removed."""
        if not self.store.delete_user(user_id):
            raise NotFoundError()
        logger.info(
            "Deleted user id=%s (requested by user id=%s)",
            user_id,
            caller.user_id if caller else "cli",
        )

    def who_am_i(self, identity: TokenIdentity) -> User:
        """Return the user named by a verified token.

        Raises UserNotFoundError if the user was deleted after the token was issued.
        """
        user = self.store.get_by_id(identity.user_id)
        if user is None:
            raise UserNotFoundError()
        return user
