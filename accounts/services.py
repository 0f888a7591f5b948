# accounts/services.py
import logging

from core.errors import SignupRejected
from utils.validators import PASSWORD_MIN_LENGTH, validate_password_length

logger = logging.getLogger(__name__)


def register_user(backend, name: str, email: str, password: str, cancel_token=None) -> str:
    """
    Forward a validated signup to the identity backend.
    Raises the core.errors kinds unchanged; callers map them to responses.
    DuplicateEmail is a SignupRejected.
    """
    if not validate_password_length(password):
        raise SignupRejected(f"Password must be at least {PASSWORD_MIN_LENGTH} characters", status=400)

    try:
        user_id = backend.sign_up(name, email, password, cancel_token=cancel_token)
    except SignupRejected as e:
        logger.warning(f"Signup rejected for {email}: {e.message}")
        raise

    logger.info(f"User {user_id} ({email}) has registered.")
    return user_id


def authenticate(backend, email: str, password: str, cancel_token=None):
    """Credential exchange. Returns an AuthSession."""
    auth_session = backend.sign_in_with_password(email, password, cancel_token=cancel_token)
    logger.info(f"User {auth_session.user_id} ({auth_session.email}) signed in.")
    return auth_session
