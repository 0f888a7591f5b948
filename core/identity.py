# core/identity.py
"""
Thin adapter over Supabase Auth (the hosted Identity Backend).

Every call builds its own client over a short-lived httpx.Client, so no auth
state is shared between visitors and the CancelToken deadline bounds the
actual HTTP request. Library exceptions are translated into the kinds
defined in core.errors. Nothing outside this module imports supabase directly.
"""
import logging
import time
from typing import Optional

import httpx
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from supabase import AuthApiError, AuthError, Client, ClientOptions, create_client

from accounts.models import AuthSession
from core.cancellation import CancelToken
from core.errors import (
    DuplicateEmail,
    InvalidCredentials,
    RequestCancelled,
    SessionExpired,
    SignupRejected,
    TransportError,
)

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_CODES = {"user_already_exists", "email_exists"}

# Statuses that mean "these tokens are no good". Anything else (rate limits,
# gateway errors) means validation could not complete.
TOKEN_REJECTED_STATUSES = {400, 401, 403}


def _status(exc: AuthApiError) -> int:
    return getattr(exc, "status", None) or 0


def _is_transport_failure(exc: AuthApiError) -> bool:
    """Rate limiting and server-side failures are not a verdict on the request."""
    status = _status(exc)
    return status == 429 or status >= 500 or status == 0


def _user_name(user) -> Optional[str]:
    metadata = getattr(user, "user_metadata", None) or {}
    # Credential signups store "name"; OAuth providers usually send "full_name".
    return metadata.get("name") or metadata.get("full_name") or None


def session_from_response(response) -> AuthSession:
    """Build an AuthSession from a supabase AuthResponse."""
    session = getattr(response, "session", None)
    user = getattr(response, "user", None) or getattr(session, "user", None)
    if session is None or user is None:
        raise TransportError("Identity backend returned no session")

    expires_at = session.expires_at
    if expires_at is None and session.expires_in:
        expires_at = int(time.time()) + int(session.expires_in)

    return AuthSession(
        user_id=str(user.id),
        email=user.email or "",
        name=_user_name(user),
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=expires_at,
    )


class SupabaseIdentityBackend:
    """Identity operations used by the signup, signin and session guard flows."""

    def __init__(self, url: str, anon_key: str, timeout: Optional[float] = None):
        self.url = url
        self.anon_key = anon_key
        self.timeout = timeout

    # -----------------------------
    # Plumbing
    # -----------------------------
    def _client(self, http_client: httpx.Client, storage=None) -> Client:
        option_kwargs = {
            "persist_session": False,
            "auto_refresh_token": False,
            "flow_type": "pkce",
            "httpx_client": http_client,
        }
        if storage is not None:
            option_kwargs["storage"] = storage
        return create_client(self.url, self.anon_key, options=ClientOptions(**option_kwargs))

    def _call(self, operation: str, func, cancel_token: Optional[CancelToken], storage=None):
        """
        Run one backend call as func(client).
        The HTTP timeout is whatever is left of the token's deadline.
        AuthApiError is left for the caller to classify; anything else the
        library or httpx raises becomes a TransportError.
        """
        token = cancel_token or CancelToken.with_timeout(self.timeout)
        token.raise_if_cancelled()
        try:
            with httpx.Client(timeout=token.remaining()) as http_client:
                return func(self._client(http_client, storage=storage))
        except AuthApiError:
            raise
        except httpx.TimeoutException as e:
            logger.error(f"Identity backend timed out during {operation}: {e}")
            raise RequestCancelled(f"Identity request cancelled: deadline exceeded during {operation}") from e
        except (AuthError, httpx.HTTPError) as e:
            logger.error(f"Identity backend unreachable during {operation}: {e}", exc_info=True)
            raise TransportError(str(e)) from e

    # -----------------------------
    # Signup / signin
    # -----------------------------
    def sign_up(self, name: str, email: str, password: str, cancel_token=None) -> str:
        """Create the account. Returns the new user id."""
        credentials = {
            "email": email,
            "password": password,
            "options": {"data": {"name": name}},
        }
        try:
            response = self._call("sign_up", lambda client: client.auth.sign_up(credentials), cancel_token)
        except AuthApiError as e:
            if _is_transport_failure(e):
                raise TransportError(e.message, status=e.status) from e
            code = getattr(e, "code", None)
            if code in DUPLICATE_EMAIL_CODES or "already registered" in (e.message or "").lower():
                raise DuplicateEmail(e.message, status=e.status) from e
            raise SignupRejected(e.message, status=e.status) from e

        user = response.user
        if user is None:
            raise TransportError("Identity backend returned no user")
        # With email confirmation on, Supabase answers a repeat signup with an
        # obfuscated user that has no identities instead of an error.
        if user.identities is not None and len(user.identities) == 0:
            raise DuplicateEmail(status=409)
        return str(user.id)

    def sign_in_with_password(self, email: str, password: str, cancel_token=None) -> AuthSession:
        credentials = {"email": email, "password": password}
        try:
            response = self._call(
                "sign_in_with_password",
                lambda client: client.auth.sign_in_with_password(credentials),
                cancel_token,
            )
        except AuthApiError as e:
            if _is_transport_failure(e):
                raise TransportError(e.message, status=e.status) from e
            raise InvalidCredentials(e.message, status=e.status) from e
        return session_from_response(response)

    def oauth_authorize_url(self, provider: str, redirect_to: str, storage, cancel_token=None) -> str:
        """Provider authorization URL; the PKCE verifier is written into storage."""
        params = {"provider": provider, "options": {"redirect_to": redirect_to}}
        try:
            response = self._call(
                "sign_in_with_oauth",
                lambda client: client.auth.sign_in_with_oauth(params),
                cancel_token,
                storage=storage,
            )
        except AuthApiError as e:
            raise TransportError(e.message, status=e.status) from e
        return response.url

    def exchange_code(self, code: str, storage, cancel_token=None) -> AuthSession:
        try:
            response = self._call(
                "exchange_code_for_session",
                lambda client: client.auth.exchange_code_for_session({"auth_code": code}),
                cancel_token,
                storage=storage,
            )
        except AuthApiError as e:
            raise TransportError(e.message, status=e.status) from e
        return session_from_response(response)

    # -----------------------------
    # Session upkeep
    # -----------------------------
    def get_user(self, access_token: str, cancel_token=None) -> dict:
        """Validate an access token. Returns {"id", "email", "name"}."""
        try:
            response = self._call("get_user", lambda client: client.auth.get_user(access_token), cancel_token)
        except AuthApiError as e:
            if _status(e) not in TOKEN_REJECTED_STATUSES:
                raise TransportError(e.message, status=e.status) from e
            raise SessionExpired(e.message, status=e.status) from e
        if response is None or response.user is None:
            raise SessionExpired()
        user = response.user
        return {"id": str(user.id), "email": user.email or "", "name": _user_name(user)}

    def refresh(self, refresh_token: str, cancel_token=None) -> AuthSession:
        try:
            response = self._call(
                "refresh_session", lambda client: client.auth.refresh_session(refresh_token), cancel_token
            )
        except AuthApiError as e:
            if _status(e) not in TOKEN_REJECTED_STATUSES:
                raise TransportError(e.message, status=e.status) from e
            raise SessionExpired(e.message, status=e.status) from e
        return session_from_response(response)

    def sign_out(self, access_token: str, cancel_token=None):
        """Revoke the session's refresh tokens at the backend."""
        try:
            self._call("sign_out", lambda client: client.auth.admin.sign_out(access_token), cancel_token)
        except AuthApiError as e:
            # already-revoked or expired tokens are fine here
            logger.info(f"Sign-out rejected by identity backend: {e.message}")


# -------------------------------------------------------------------
# Factories
# -------------------------------------------------------------------
def get_identity_backend() -> SupabaseIdentityBackend:
    url = settings.SUPABASE_URL
    anon_key = settings.SUPABASE_ANON_KEY
    if not url or not anon_key:
        raise ImproperlyConfigured("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
    return SupabaseIdentityBackend(url, anon_key, timeout=settings.IDENTITY_TIMEOUT_SECONDS)


def create_admin_client() -> Optional[Client]:
    """
    Client authenticated with the service-role key, or None when the key
    is not configured. No request path uses it.
    """
    if not settings.SUPABASE_SERVICE_ROLE_KEY or not settings.SUPABASE_URL:
        return None
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def new_cancel_token() -> CancelToken:
    return CancelToken.with_timeout(settings.IDENTITY_TIMEOUT_SECONDS)
