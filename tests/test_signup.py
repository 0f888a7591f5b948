"""Signup endpoint and signup page."""

from __future__ import annotations

import json

import pytest

from accounts import services
from core.errors import DuplicateEmail, SignupRejected

SIGNUP_API = "/api/auth/signup"
SIGNUP_PAGE = "/auth/signup/"


def _post_json(client, body):
    return client.post(SIGNUP_API, data=json.dumps(body), content_type="application/json")


# ---------------------------------------------------------------------------
# POST /api/auth/signup
# ---------------------------------------------------------------------------


class TestSignupApi:
    def test_creates_account_and_allows_signin(self, client, identity_backend):
        resp = _post_json(client, {"name": "Grace", "email": "grace@example.com", "password": "hopper1"})

        assert resp.status_code == 201
        assert "grace@example.com" in identity_backend.users

        signin = client.post("/auth/signin/", {"email": "grace@example.com", "password": "hopper1"})
        assert signin.status_code == 302
        assert signin["Location"] == "/dashboard/"

    def test_email_is_normalised_before_forwarding(self, client, identity_backend):
        resp = _post_json(client, {"name": "Grace", "email": "  Grace@Example.COM ", "password": "hopper1"})

        assert resp.status_code == 201
        assert list(identity_backend.users) == ["grace@example.com"]

    def test_duplicate_email_is_rejected_without_new_record(self, client, identity_backend, registered_user):
        resp = _post_json(client, {"name": "Other Ada", "email": "ada@example.com", "password": "another1"})

        assert resp.status_code == 409
        assert resp.json() == {"error": "User already registered"}
        assert len(identity_backend.users) == 1
        assert identity_backend.users["ada@example.com"]["name"] == "Ada Lovelace"

    def test_short_password_rejected_before_backend(self, client, identity_backend):
        resp = _post_json(client, {"name": "Grace", "email": "grace@example.com", "password": "12345"})

        assert resp.status_code == 400
        assert "at least 6" in resp.json()["error"]
        assert "sign_up" not in identity_backend.calls

    def test_missing_name(self, client, identity_backend):
        resp = _post_json(client, {"email": "grace@example.com", "password": "hopper1"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Name is required"
        assert identity_backend.calls == []

    def test_blank_name(self, client):
        resp = _post_json(client, {"name": "   ", "email": "grace@example.com", "password": "hopper1"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Name is required"

    def test_invalid_email(self, client):
        resp = _post_json(client, {"name": "Grace", "email": "not-an-email", "password": "hopper1"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Enter a valid email address"

    def test_malformed_json(self, client):
        resp = client.post(SIGNUP_API, data="{not json", content_type="application/json")

        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid request body"}

    def test_non_object_body(self, client):
        resp = _post_json(client, ["grace@example.com"])

        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid request body"}

    @pytest.mark.parametrize("body", [
        {"name": "Grace", "email": "grace@example.com", "password": 1234567},
        {"name": ["Grace"], "email": "grace@example.com", "password": "hopper1"},
        {"name": "Grace", "email": {"addr": "grace@example.com"}, "password": "hopper1"},
    ])
    def test_non_string_fields_rejected(self, client, identity_backend, body):
        resp = _post_json(client, body)

        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid request body"}
        assert identity_backend.calls == []

    def test_get_not_allowed(self, client):
        assert client.get(SIGNUP_API).status_code == 405

    def test_backend_unreachable(self, client, identity_backend):
        identity_backend.unreachable = True

        resp = _post_json(client, {"name": "Grace", "email": "grace@example.com", "password": "hopper1"})

        assert resp.status_code == 502
        assert resp.json() == {"error": "An error occurred"}


# ---------------------------------------------------------------------------
# /auth/signup/ (HTML)
# ---------------------------------------------------------------------------


class TestSignupPage:
    def test_renders_form(self, client):
        resp = client.get(SIGNUP_PAGE)

        assert resp.status_code == 200
        body = resp.content.decode()
        assert "Sign Up" in body
        assert 'minlength="6"' in body

    def test_success_page_redirects_to_signin(self, client, identity_backend):
        resp = client.post(SIGNUP_PAGE, {"name": "Grace", "email": "grace@example.com", "password": "hopper1"})

        assert resp.status_code == 200
        body = resp.content.decode()
        assert "Account created successfully" in body
        assert 'content="2;url=/auth/signin/"' in body
        assert "grace@example.com" in identity_backend.users

    def test_duplicate_shows_backend_message(self, client, registered_user):
        resp = client.post(SIGNUP_PAGE, {"name": "Ada", "email": "ada@example.com", "password": "secret1"})

        assert resp.status_code == 200
        assert "User already registered" in resp.content.decode()

    def test_short_password_shows_inline_error(self, client, identity_backend):
        resp = client.post(SIGNUP_PAGE, {"name": "Grace", "email": "grace@example.com", "password": "123"})

        assert "Password must be at least 6 characters" in resp.content.decode()
        assert identity_backend.calls == []


# ---------------------------------------------------------------------------
# accounts.services.register_user
# ---------------------------------------------------------------------------


class TestRegisterUser:
    def test_duplicate_propagates_as_its_own_kind(self, identity_backend, registered_user):
        with pytest.raises(DuplicateEmail) as exc_info:
            services.register_user(identity_backend, "Ada", "ada@example.com", "secret1")

        assert exc_info.value.user_message == "User already registered"

    def test_short_password_never_reaches_backend(self, identity_backend):
        with pytest.raises(SignupRejected, match="at least 6"):
            services.register_user(identity_backend, "Grace", "grace@example.com", "123")

        assert identity_backend.calls == []

    def test_returns_new_user_id(self, identity_backend):
        user_id = services.register_user(identity_backend, "Grace", "grace@example.com", "hopper1")

        assert identity_backend.users["grace@example.com"]["id"] == user_id
