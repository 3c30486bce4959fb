# =============================================================================
# lib/validation.py - Input Validation Helpers
# =============================================================================
# Field checks that go beyond what the Pydantic request models express.
# Each check returns a list of human-readable problems; empty means valid.
# =============================================================================

import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 8


def validate_email(email: str) -> bool:
    """Loose shape check: something@domain.tld with no whitespace."""
    return bool(EMAIL_PATTERN.match(email))


def validate_password(password: str) -> list[str]:
    """
    Check password strength.

    Returns:
        List of problems, empty if the password is acceptable
    """
    errors = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")

    return errors
