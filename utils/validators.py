# utils/validators.py

PASSWORD_MIN_LENGTH = 6


# -----------------------------
# String Normalization
# -----------------------------
def normalize_string(val):
    """Normalize strings (strip + lowercase)."""
    if isinstance(val, str):
        return val.strip().lower()
    elif val is not None:
        return str(val).strip().lower()
    return ''


def normalize_email(email) -> str:
    """Emails are matched case-insensitively by the identity backend."""
    return normalize_string(email)


# -----------------------------
# Simple validators
# -----------------------------
def is_blank(val) -> bool:
    return val is None or not str(val).strip()


def validate_password_length(password) -> bool:
    """Same minimum the signup form enforces in the browser."""
    return isinstance(password, str) and len(password) >= PASSWORD_MIN_LENGTH
