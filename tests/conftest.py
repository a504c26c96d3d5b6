"""
tests/conftest.py -- Shared test fixtures for SessionGate.

This module provides:
  - store: an isolated in-memory AuthStore for unit tests
  - alice / bob: two provisioned users in that store (with plaintext passwords)
  - gateway: a TestClient over the real app with a patched lifespan, backed
    by its own named shared-memory store and the same two users

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the TestClient fixtures because route handlers may run on worker threads.
Plain :memory: DBs are per-connection and would present a blank schema to
each thread. The named URI format shares one in-memory instance across all
connections in the same process. Each gateway gets a fresh name so tests
that change emails or passwords cannot leak into each other.

Environment variables must be set before any api/auth/core import:
  BCRYPT_ROUNDS=4  keeps hashing fast
  ALLOWED_HOSTS    admits the TestClient's "testserver" host
  DEBUG=true       silences the insecure-cookie warning
"""

from __future__ import annotations

import itertools
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: set before importing anything that calls get_settings().
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver"]')
os.environ.setdefault("DATABASE_URL", "sqlite:///file:sessiongate_default?mode=memory&cache=shared&uri=true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.credentials import hash_password
from auth.models import User
from auth.store import AuthStore

_db_counter = itertools.count()


@dataclass
class Account:
    """A provisioned user plus the plaintext password it was created with."""

    user: User
    password: str

    @property
    def id(self) -> int:
        return self.user.id

    @property
    def email(self) -> str:
        return self.user.email


@dataclass
class Gateway:
    client: TestClient
    store: AuthStore
    alice: Account
    bob: Account


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def provision(store: AuthStore, email: str, password: str) -> Account:
    user_id = store.create_user(email, hash_password(password))
    return Account(user=User(id=user_id, email=email), password=password)


def _patch_lifespan(store: AuthStore):
    """Return a lifespan that wires the test store into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.store = store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[AuthStore, None, None]:
    s = AuthStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def alice(store: AuthStore) -> Account:
    return provision(store, "alice@example.com", "alice-password")


@pytest.fixture
def bob(store: AuthStore) -> Account:
    return provision(store, "bob@example.com", "bob-password")


# ---------------------------------------------------------------------------
# Integration fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def gateway() -> Generator[Gateway, None, None]:
    """Yield a Gateway: TestClient on the real app plus its store and users.

    follow_redirects=False so nothing is hidden; the app never redirects.
    """
    db_url = f"sqlite:///file:sessiongate_test_{next(_db_counter)}?mode=memory&cache=shared&uri=true"
    test_store = AuthStore(db_url)
    alice_account = provision(test_store, "alice@example.com", "alice-password")
    bob_account = provision(test_store, "bob@example.com", "bob-password")

    app.router.lifespan_context = _patch_lifespan(test_store)

    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield Gateway(client=client, store=test_store, alice=alice_account, bob=bob_account)

    test_store.close()
