# core/errors.py
"""
Error kinds raised by the identity adapter.

Each failure cause gets its own class so callers can log and branch on it,
while the views collapse them to the same coarse messages shown to visitors.
"""

GENERIC_ERROR_MESSAGE = "An error occurred"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class IdentityError(Exception):
    """Base class for every failure coming out of the Identity Backend."""

    default_message = GENERIC_ERROR_MESSAGE

    def __init__(self, message=None, status=None):
        self.message = message or self.default_message
        self.status = status
        super().__init__(self.message)

    @property
    def user_message(self):
        return GENERIC_ERROR_MESSAGE


class SignupRejected(IdentityError):
    """Backend refused to create the account (validation, weak password...)."""

    default_message = "Signup failed"

    @property
    def user_message(self):
        # backend text is shown as-is for signup
        return self.message


class DuplicateEmail(SignupRejected):
    default_message = "User already registered"


class InvalidCredentials(IdentityError):
    default_message = "Invalid login credentials"

    @property
    def user_message(self):
        return INVALID_CREDENTIALS_MESSAGE


class SessionExpired(IdentityError):
    """Access token (and refresh token, if tried) no longer accepted."""

    default_message = "Session expired"


class TransportError(IdentityError):
    """Network failure or an unexpected backend response."""


class RequestCancelled(TransportError):
    default_message = "Identity request cancelled"


def user_message(exc: Exception) -> str:
    """Map any exception to the text shown inline to the visitor."""
    if isinstance(exc, IdentityError):
        return exc.user_message
    return GENERIC_ERROR_MESSAGE
