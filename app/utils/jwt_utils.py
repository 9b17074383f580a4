"""JWT utilities: signing-key loading, access-token signing and verification"""
from datetime import datetime, timezone
from typing import Any, Dict, NamedTuple, Optional

from jose import JWTError, jwt

from app.config import settings
from app.models.admin_user import ADMIN_ROLES
from app.utils.crypto import ConfigurationError
from app.utils.logger import logger

MIN_SIGNING_KEY_BYTES = 32
ACCESS_TOKEN_TYPE = "access"


class AdminIdentity(NamedTuple):
    """Authenticated admin as carried in access tokens and resolved per request"""
    id: str
    email: str
    role: str   # SUPER_ADMIN | MANAGER | VIEWER


# ---------------------------------------------------------------------------
# Signing key
# ---------------------------------------------------------------------------

def load_signing_key(secret: Optional[str] = None) -> str:
    """Return the HS256 signing secret.

    Called from application startup so that a missing or short ``JWT_SECRET``
    aborts the process instead of failing on the first login.

    Raises:
        ConfigurationError: the secret is missing or shorter than 32 bytes.
    """
    secret = settings.JWT_SECRET if secret is None else secret
    if not secret:
        raise ConfigurationError("JWT_SECRET is not configured")
    if len(secret.encode("utf-8")) < MIN_SIGNING_KEY_BYTES:
        raise ConfigurationError(f"JWT_SECRET must be at least {MIN_SIGNING_KEY_BYTES} bytes")
    return secret


# ---------------------------------------------------------------------------
# Token creation
# ---------------------------------------------------------------------------

def create_access_token(identity: AdminIdentity, expires_in: Optional[int] = None) -> str:
    """Sign and return a short-lived access token.

    Args:
        identity:   Admin the token is issued to; ``id``, ``email`` and ``role``
                    are embedded as claims.
        expires_in: Lifetime in seconds (defaults to ``ACCESS_TOKEN_EXPIRE_SECONDS``).

    Returns:
        Signed JWT string.
    """
    if expires_in is None:
        expires_in = settings.ACCESS_TOKEN_EXPIRE_SECONDS

    now = int(datetime.now(timezone.utc).timestamp())

    payload: Dict[str, Any] = {
        "id": identity.id,
        "email": identity.email,
        "role": identity.role,
        "iat": now,
        "exp": now + expires_in,
        "type": ACCESS_TOKEN_TYPE,
    }

    return jwt.encode(payload, load_signing_key(), algorithm=settings.JWT_ALGORITHM)


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------

def verify_access_token(token: Optional[str]) -> Optional[AdminIdentity]:
    """Verify an access token and return the identity it carries.

    Checks signature, expiry and claim shape. Any failure, including a
    missing signing key or malformed input, yields ``None``; this function
    never raises.
    """
    if not token:
        return None

    try:
        payload = jwt.decode(token, load_signing_key(), algorithms=[settings.JWT_ALGORITHM])
    except (JWTError, ConfigurationError) as exc:
        logger.debug(f"Access token rejected: {exc}")
        return None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        return None

    admin_id, email, role = payload.get("id"), payload.get("email"), payload.get("role")
    if not all(isinstance(value, str) and value for value in (admin_id, email, role)):
        return None
    if role not in ADMIN_ROLES:
        return None

    return AdminIdentity(id=admin_id, email=email, role=role)
