"""Test fixtures with an in-memory identity backend (no Supabase needed)."""

from __future__ import annotations

import pytest

from _helpers import FakeIdentityBackend, put_session
from core import identity


@pytest.fixture(autouse=True)
def enable_db_access_for_all_tests(db):
    """Django sessions are stored in the database."""


@pytest.fixture(autouse=True)
def identity_backend(monkeypatch):
    backend = FakeIdentityBackend()
    monkeypatch.setattr(identity, "get_identity_backend", lambda: backend)
    return backend


@pytest.fixture
def registered_user(identity_backend):
    return identity_backend.add_user("ada@example.com", "secret1", name="Ada Lovelace")


@pytest.fixture
def signed_in_client(client, identity_backend, registered_user):
    auth_session = identity_backend.issue(registered_user["email"])
    put_session(client, auth_session)
    client.auth_session = auth_session
    return client
