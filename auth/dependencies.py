"""
auth/dependencies.py -- FastAPI Depends() helpers: the auth gate.

Only one auth method exists: the `Authorization: Bearer <token>` header.

  require_identity() -- the gate. Missing/empty/non-Bearer header raises
      MissingTokenError (401). A token that fails verification raises
      InvalidTokenError (403) whatever the reason; the reason is logged.
      On success the TokenIdentity is stored on request.state.identity and
      returned to the route.

  get_account_service() -- hands routes the AccountService built at startup.

Layer rule: no imports from api/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.errors import InvalidTokenError, MissingTokenError
from auth.models import TokenIdentity
from auth.service import AccountService
from auth.tokens import decode_access_token

logger = logging.getLogger("accountsvc.auth")


def _bearer_token(request: Request) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` header, or None."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def require_identity(request: Request) -> TokenIdentity:
    """Require a valid bearer token.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: TokenIdentity = Depends(require_identity)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise MissingTokenError()

    try:
        identity = decode_access_token(token, request.app.state.settings)
    except InvalidTokenError as exc:
        logger.info(
            "Rejected token on %s %s: %s",
            request.method,
            request.url.path,
            exc.reason,
        )
        raise

    request.state.identity = identity
    return identity


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service
