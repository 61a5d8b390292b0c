"""
tests/conftest.py -- Shared test fixtures for the marketplace test suite.

This module provides:
  - hasher / token_manager: fast, deterministic auth primitives
  - user_store / post_store: per-test in-memory stores
  - _make_test_stores(): named shared-memory DBs for the HTTP tests
  - _patch_lifespan(): wires test stores and services into app.state
  - api_client: TestClient plus a registered user's bearer token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the HTTP tests because TestClient runs sync route handlers in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread.

DEBUG and ALLOWED_HOSTS must be set before any api/core import: Settings is
read once when api.main is imported.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import timedelta

# CRITICAL: Set before any api/core import so get_settings() auto-generates
# SECRET_KEY in dev mode and TrustedHostMiddleware accepts TestClient's host.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.hashing import PasswordHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenManager
from posts.service import PostService
from posts.store import PostStore

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters"
TEST_PASSWORD = "Str0ng!pass"

# Rate limits would trip across a module's worth of login calls.
limiter.enabled = False


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hasher() -> PasswordHasher:
    """bcrypt at the minimum cost so the suite stays fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_manager() -> TokenManager:
    return TokenManager(TEST_SECRET, timedelta(hours=1))


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def post_store() -> Generator[PostStore, None, None]:
    store = PostStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def auth_service(user_store: UserStore, hasher: PasswordHasher, token_manager: TokenManager) -> AuthService:
    return AuthService(user_store, hasher, token_manager)


@pytest.fixture
def post_service(post_store: PostStore) -> PostService:
    return PostService(post_store)


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, PostStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'health').
    """
    users_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    posts_url = f"sqlite:///file:test_posts_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(users_url), PostStore(posts_url)


def _patch_lifespan(user_store: UserStore, post_store: PostStore, token_manager: TokenManager):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.post_store = post_store
        app.state.token_manager = token_manager
        app.state.auth_service = AuthService(user_store, PasswordHasher(rounds=4), token_manager)
        app.state.post_service = PostService(post_store)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, token, login) for API integration tests.

    A user "alice" with password TEST_PASSWORD is registered through the real
    service before the client starts, and a bearer token is issued for her.
    """
    user_store, post_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])
    tokens = TokenManager(TEST_SECRET, timedelta(hours=1))
    AuthService(user_store, PasswordHasher(rounds=4), tokens).register("alice", TEST_PASSWORD)
    token = tokens.issue("alice")

    app.router.lifespan_context = _patch_lifespan(user_store, post_store, tokens)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, "alice"

    user_store.close()
    post_store.close()
