"""
api/main.py -- FastAPI application factory for the account service.

Run with:      uvicorn asgi:app --reload
               python main.py serve

create_app(settings) builds a fresh FastAPI instance around an explicit,
immutable Settings object. Nothing reads configuration at import time: the
same Settings reference is stored on app.state and handed to AccountService,
which passes it to the token issuer. Tests build their own app with their own
Settings.

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- adds CORS headers for allowed browser origins
  2. log_requests   -- one log line per request with latency

Lifespan handles startup (open the user store, create the schema if missing)
and shutdown (dispose the engine) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.users import router as users_router
from auth.errors import AccountError
from auth.service import AccountService
from auth.store import UserStore, database_url
from core.config import Settings

__version__ = "1.0.0"

logger = logging.getLogger("accountsvc.api")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the user store on startup and dispose of it on shutdown.

    UserStore() runs create_all, so the users table exists before the first
    request. If app.state.user_store was already set (tests inject one), it is
    reused and left open.
    """
    settings: Settings = app.state.settings
    logger.info("Account service starting up")
    owns_store = getattr(app.state, "user_store", None) is None
    if owns_store:
        app.state.user_store = UserStore(database_url(settings))
    app.state.account_service = AccountService(app.state.user_store, settings)
    logger.info("User store initialized (%d users)", app.state.user_store.count_users())

    yield

    if owns_store:
        app.state.user_store.close()
    logger.info("Account service shutdown complete")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings, user_store: UserStore | None = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings:   Immutable configuration, shared by reference with every
                    component that needs it.
        user_store: Optional pre-built store. When given, the lifespan uses it
                    instead of opening one from settings and does not close it.
    """
    _configure_logging(settings.debug)

    app = FastAPI(
        title="Account Service",
        description="Register, log in, and manage user accounts behind a bearer-token gate.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_store = user_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            request.client.host if request.client else "unknown",
        )
        return response

    app.include_router(users_router, tags=["Users"])
    _register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    def health(request: Request) -> HealthResponse:
        """Return liveness, version, and database reachability. No auth."""
        db_ok = request.app.state.user_store.ping()
        return HealthResponse(
            version=__version__,
            components={"app": "ok", "database": "ok" if db_ok else "error"},
        )

    return app


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AccountError)
    async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
        """Map a domain error to its status, code, and message.

        InvalidTokenError always carries the same code and message; its
        reason never reaches the response.
        """
        return _error_response(exc.status_code, exc.code, exc.message, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 400 when the request body or path params fail schema validation."""
        fields = sorted({".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()})
        return _error_response(
            400,
            "validation_error",
            "All fields are required.",
            detail=f"Invalid or missing: {', '.join(f for f in fields if f)}" if fields else None,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Structured errors for HTTPException, including Starlette's 404/405 for unknown routes."""
        if isinstance(exc.detail, dict):
            return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
        return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected faults (database errors, HashingError).

        The exception is logged; the client receives only a generic message.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _error_response(500, "internal_error", "An unexpected error occurred.")
