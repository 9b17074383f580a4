"""Password strength rules and bcrypt hashing"""
import re
from typing import NamedTuple, Optional

import bcrypt

BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 12

# (pattern that must match, message when it does not), checked in order
_RULES = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
    (re.compile(r"[^A-Za-z0-9]"), "Password must contain at least one special character"),
)


class PasswordCheck(NamedTuple):
    """Result of :func:`validate_password`"""
    valid: bool
    reason: Optional[str] = None


def validate_password(plain: str) -> PasswordCheck:
    """Check a candidate password against the strength policy.

    Returns the first failing rule's message, or ``PasswordCheck(True)``.
    """
    if len(plain) < MIN_PASSWORD_LENGTH:
        return PasswordCheck(False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    for pattern, message in _RULES:
        if not pattern.search(plain):
            return PasswordCheck(False, message)

    return PasswordCheck(True)


def hash_password(plain: str) -> str:
    """Hash a password with bcrypt"""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash; malformed hashes never match"""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
