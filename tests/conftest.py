"""
tests/conftest.py -- Shared test fixtures for account service tests.

This module provides:
  - settings: an explicit Settings with a fixed secret and cheap bcrypt rounds
  - store: an isolated in-memory UserStore (single-threaded unit tests)
  - service: AccountService over that store
  - api_client: TestClient over a fresh app wired to a shared-memory store

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the TestClient fixture because TestClient runs sync route handlers in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

The DEBUG env var is set before any project import so an accidental
get_settings() call auto-generates SECRET_KEY instead of raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator

# Set DEBUG before any auth/core import.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.service import AccountService
from auth.store import UserStore
from core.config import Settings

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters-long"


@pytest.fixture
def settings() -> Settings:
    """Settings built explicitly -- no .env or environment lookups matter here.

    bcrypt_rounds=4 is bcrypt's minimum and keeps the suite fast.
    """
    return Settings(_env_file=None, secret_key=TEST_SECRET, bcrypt_rounds=4, debug=False)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def service(store: UserStore, settings: Settings) -> AccountService:
    return AccountService(store, settings)


@pytest.fixture
def api_client(settings: Settings) -> Generator[TestClient, None, None]:
    """Yield a TestClient over a fresh app and an empty shared-memory store.

    Function-scoped: every test starts with no users, so ids and emails never
    collide between tests. The store is created here (not by the lifespan) so
    the named in-memory DB stays alive for the whole test.
    """
    url = f"sqlite:///file:test_accounts_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    user_store = UserStore(url)
    app = create_app(settings, user_store=user_store)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client
    user_store.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def register(client: TestClient, name: str = "Ana", email: str = "ana@x.com", password: str = "secret1"):
    return client.post("/users", json={"name": name, "email": email, "password": password})


def login_token(client: TestClient, email: str = "ana@x.com", password: str = "secret1") -> str:
    resp = client.post("/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
