"""
api/routes/users.py -- Account REST endpoints.

Routes:
  POST   /users        -- register (public)
  POST   /login        -- password login; returns a bearer token (public)
  GET    /users        -- list all users (requires auth)
  DELETE /users/{id}   -- delete any user by id (requires auth, no ownership check)
  GET    /me           -- the caller's own user (requires auth)

Errors are raised as AccountError subclasses by AccountService or the auth
gate and rendered by the handler in api/main.py. Routes never build error
responses themselves.

Security:
  [M5] Cache-Control: no-store on login responses.
  User payloads are built through UserResponse.from_user(), which has no
  password field.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, MessageResponse, RegisterRequest, RegisterResponse, UserResponse
from auth.dependencies import get_account_service, require_identity
from auth.models import TokenIdentity
from auth.service import AccountService

# Auth policy:
# - POST   /users:       public -- registration
# - POST   /login:       public -- login endpoint must be unauthenticated
# - GET    /users:       requires auth (require_identity)
# - DELETE /users/{id}:  requires auth (require_identity); any caller may delete any user
# - GET    /me:          requires auth (require_identity)
router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/users", response_model=RegisterResponse, status_code=201)
def register(
    body: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """Create a user account. Returns the created user without its password hash."""
    user = service.register(body.name, body.email, body.password)
    return RegisterResponse(user=UserResponse.from_user(user))


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> JSONResponse:
    """Authenticate with email and password and return a bearer token.

    404 for an unknown email, 401 for a wrong password.
    """
    token, _user = service.login(body.email, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=token,
            expires_in=service.settings.token_expire_seconds,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/users", response_model=list[UserResponse])
def list_users(
    identity: TokenIdentity = Depends(require_identity),
    service: AccountService = Depends(get_account_service),
) -> list[UserResponse]:
    """List every user account. No pagination."""
    return [UserResponse.from_user(u) for u in service.list_users()]


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    identity: TokenIdentity = Depends(require_identity),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Delete a user by id. 404 if no such user.

    Only token validity is checked, not ownership.
    """
    service.delete_user(user_id, caller=identity)
    return MessageResponse(message="User deleted.")


@router.get("/me", response_model=UserResponse)
def me(
    identity: TokenIdentity = Depends(require_identity),
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    """Return the caller's own user record. 404 if it was deleted after login."""
    return UserResponse.from_user(service.who_am_i(identity))
