"""
tests/conftest.py -- Shared test fixtures for Skillfolio.

This module provides:
  - make_settings(): Settings for an isolated database with a fixed secret
  - user_store / profile_store / tokens: unit-test collaborators on a fresh DB
  - api_client: TestClient over create_app() for integration tests
  - register_user: factory that signs up + logs in through the API

Design: every store gets its own SQLite *file* under pytest's tmp dir rather
than a shared-memory URI. The concurrency tests open many connections from
many threads, which needs real file locking, and a file keeps every fixture
on one code path.

BCRYPT_ROUNDS is 4 (the bcrypt minimum) so the suite is not dominated by
deliberately slow hashing. Production defaults to 12.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings
from profiles.store import ProfileStore

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789"
TEST_ROUNDS = 4


def make_settings(db_path: Path) -> Settings:
    return Settings(
        debug=True,
        secret_key=TEST_SECRET,
        database_url=f"sqlite:///{db_path}",
        bcrypt_rounds=TEST_ROUNDS,
        frontend_url="http://frontend.test",
    )


# ---------------------------------------------------------------------------
# Unit-test fixtures -- fresh database per test
# ---------------------------------------------------------------------------


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'skillfolio_test.db'}"


@pytest.fixture
def user_store(db_url: str) -> Generator[UserStore, None, None]:
    store = UserStore(db_url)
    yield store
    store.close()


@pytest.fixture
def profile_store(db_url: str) -> Generator[ProfileStore, None, None]:
    store = ProfileStore(db_url)
    yield store
    store.close()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_SECRET, expire_seconds=3600)


# ---------------------------------------------------------------------------
# Integration fixtures -- one app + database per test module
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(tmp_path_factory: pytest.TempPathFactory) -> Generator[TestClient, None, None]:
    """Yield a TestClient over a real app whose lifespan opens a temp database.

    The lifespan runs on entering the with-block, so app.state.user_store,
    app.state.profile_store and app.state.tokens exist for every test.
    """
    db_path = tmp_path_factory.mktemp("api") / "skillfolio_api.db"
    app = create_app(make_settings(db_path))
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def register_user(api_client: TestClient) -> Callable[..., tuple[str, int]]:
    """Return a factory that signs up a fresh account and logs in.

    The factory returns (token, user_id). Emails are randomized so tests in
    the same module never collide on the unique email index.
    """

    def _register(name: str = "Test User", password: str = "pw12345") -> tuple[str, int]:
        email = f"user-{uuid.uuid4().hex[:12]}@example.com"
        resp = api_client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 200, resp.text
        resp = api_client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        return data["token"], data["user"]["id"]

    return _register
