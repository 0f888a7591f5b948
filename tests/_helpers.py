"""Shared fakes for the test-suite."""

from __future__ import annotations

import time
import uuid
from typing import Any
from urllib.parse import quote

from accounts.models import AuthSession
from core.errors import DuplicateEmail, InvalidCredentials, SessionExpired, TransportError
from core.session import SESSION_KEY

VERIFIER_KEY = "sb-code-verifier"


class FakeIdentityBackend:
    """In-memory stand-in for Supabase Auth."""

    def __init__(self):
        self.users: dict[str, dict[str, Any]] = {}
        self.access_tokens: dict[str, str] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.oauth_codes: dict[str, str] = {}
        self.unreachable = False
        self.calls: list[str] = []

    # -- helpers ---------------------------------------------------------

    def _check(self, operation: str, cancel_token) -> None:
        self.calls.append(operation)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if self.unreachable:
            raise TransportError("connection refused")

    def add_user(self, email: str, password: str, name: str | None = None) -> dict[str, Any]:
        user = {"id": str(uuid.uuid4()), "email": email, "name": name, "password": password}
        self.users[email] = user
        return user

    def issue(self, email: str, expires_in: int = 3600) -> AuthSession:
        user = self.users[email]
        access, refresh = uuid.uuid4().hex, uuid.uuid4().hex
        self.access_tokens[access] = email
        self.refresh_tokens[refresh] = email
        return AuthSession(
            user_id=user["id"],
            email=email,
            name=user["name"],
            access_token=access,
            refresh_token=refresh,
            expires_at=int(time.time()) + expires_in,
        )

    def expire_access(self, access_token: str) -> None:
        self.access_tokens.pop(access_token, None)

    # -- backend interface -----------------------------------------------

    def sign_up(self, name, email, password, cancel_token=None):
        self._check("sign_up", cancel_token)
        if email in self.users:
            raise DuplicateEmail("User already registered", status=422)
        return self.add_user(email, password, name)["id"]

    def sign_in_with_password(self, email, password, cancel_token=None):
        self._check("sign_in_with_password", cancel_token)
        user = self.users.get(email)
        if user is None or user["password"] != password:
            raise InvalidCredentials(status=400)
        return self.issue(email)

    def oauth_authorize_url(self, provider, redirect_to, storage, cancel_token=None):
        self._check("oauth_authorize_url", cancel_token)
        storage.set_item(VERIFIER_KEY, "verifier-123")
        return f"https://auth.example.test/authorize?provider={provider}&redirect_to={quote(redirect_to, safe='')}"

    def exchange_code(self, code, storage, cancel_token=None):
        self._check("exchange_code", cancel_token)
        email = self.oauth_codes.pop(code, None)
        if email is None or storage.get_item(VERIFIER_KEY) is None:
            raise TransportError("invalid flow state")
        storage.remove_item(VERIFIER_KEY)
        return self.issue(email)

    def get_user(self, access_token, cancel_token=None):
        self._check("get_user", cancel_token)
        email = self.access_tokens.get(access_token)
        if email is None:
            raise SessionExpired(status=401)
        user = self.users[email]
        return {"id": user["id"], "email": email, "name": user["name"]}

    def refresh(self, refresh_token, cancel_token=None):
        self._check("refresh", cancel_token)
        email = self.refresh_tokens.pop(refresh_token, None)
        if email is None:
            raise SessionExpired(status=400)
        return self.issue(email)

    def sign_out(self, access_token, cancel_token=None):
        self._check("sign_out", cancel_token)
        email = self.access_tokens.get(access_token)
        if email is None:
            return
        self.access_tokens = {t: e for t, e in self.access_tokens.items() if e != email}
        self.refresh_tokens = {t: e for t, e in self.refresh_tokens.items() if e != email}


def put_session(client, auth_session: AuthSession) -> None:
    """Store a session for the Django test client as signin would."""
    session = client.session
    session[SESSION_KEY] = auth_session.to_dict()
    session.save()
