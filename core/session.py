# core/session.py
"""
Per-request session handling.

The signed-in visitor's tokens live in Django's session under one key. Views
never read that key themselves: the guard resolves it into an AuthSession
(validated against the Identity Backend) and passes it in explicitly.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from accounts.models import AuthSession
from core.errors import SessionExpired, TransportError

logger = logging.getLogger(__name__)

SESSION_KEY = "auth_session"
STORAGE_PREFIX = "identity_storage:"


class SessionStatus(enum.Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass
class SessionState:
    status: SessionStatus
    session: Optional[AuthSession] = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED


# -----------------------------
# Storage in request.session
# -----------------------------
def load_session(request) -> Optional[AuthSession]:
    """Stored session as-is, without talking to the backend."""
    return AuthSession.from_dict(request.session.get(SESSION_KEY))


def store_session(request, auth_session: AuthSession):
    # new login → new session id
    request.session.cycle_key()
    request.session[SESSION_KEY] = auth_session.to_dict()


def clear_session(request):
    request.session.flush()


class SessionStorage:
    """
    Key/value storage for the supabase auth client, kept in the visitor's
    Django session so the PKCE code verifier survives the provider redirect.
    """

    def __init__(self, django_session):
        self._session = django_session

    def get_item(self, key: str) -> Optional[str]:
        return self._session.get(STORAGE_PREFIX + key)

    def set_item(self, key: str, value: str) -> None:
        self._session[STORAGE_PREFIX + key] = value

    def remove_item(self, key: str) -> None:
        self._session.pop(STORAGE_PREFIX + key, None)


# -----------------------------
# Validation
# -----------------------------
def resolve_session(request, backend, cancel_token=None) -> SessionState:
    """
    Validate the stored session with the Identity Backend.

    - nothing stored → UNAUTHENTICATED
    - token accepted (after at most one refresh) → AUTHENTICATED
    - token and refresh rejected → session cleared, UNAUTHENTICATED
    - backend unreachable → LOADING (nothing is cleared)
    """
    stored = load_session(request)
    if stored is None:
        return SessionState(SessionStatus.UNAUTHENTICATED)

    try:
        if not stored.is_expired():
            try:
                user = backend.get_user(stored.access_token, cancel_token=cancel_token)
                stored.email = user.get("email") or stored.email
                stored.name = user.get("name") or stored.name
                return SessionState(SessionStatus.AUTHENTICATED, stored)
            except SessionExpired:
                logger.info(f"Access token rejected for user {stored.user_id}, refreshing")

        refreshed = backend.refresh(stored.refresh_token, cancel_token=cancel_token)
        request.session[SESSION_KEY] = refreshed.to_dict()
        return SessionState(SessionStatus.AUTHENTICATED, refreshed)
    except SessionExpired:
        logger.info(f"Session for user {stored.user_id} expired, signing out locally")
        clear_session(request)
        return SessionState(SessionStatus.UNAUTHENTICATED)
    except TransportError as e:
        logger.warning(f"Could not validate session for user {stored.user_id}: {e}")
        return SessionState(SessionStatus.LOADING, None)
