"""
Security helpers.
Password hashing (bcrypt) and signed session tokens (JWT).
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from ..api.config import get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"
MAGIC_LINK_TOKEN = "magic_link"


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plaintext password against a stored bcrypt hash.

    Accounts created through a magic link have no password and never match.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def _encode(data: Dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = dict(data)
    payload.update({"type": token_type, "iat": now, "exp": now + expires_delta})
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: Dict[str, Any]) -> str:
    settings = get_settings()
    return _encode(data, ACCESS_TOKEN, timedelta(minutes=settings.access_token_expire_minutes))


def create_refresh_token(data: Dict[str, Any]) -> str:
    settings = get_settings()
    return _encode(data, REFRESH_TOKEN, timedelta(days=settings.refresh_token_expire_days))


def create_magic_link_token(email: str) -> str:
    """Single-use sign-in token; the jti claim identifies it for redemption."""
    settings = get_settings()
    return _encode(
        {"email": email, "jti": secrets.token_urlsafe(16)},
        MAGIC_LINK_TOKEN,
        timedelta(minutes=settings.magic_link_expire_minutes),
    )


def verify_token(token: str, expected_type: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a token.

    Args:
        token: Encoded JWT
        expected_type: Reject tokens whose "type" claim differs

    Returns:
        Decoded payload, or None when the token is invalid, expired,
        or of the wrong type
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected invalid token: {e}")
        return None

    if expected_type is not None and payload.get("type") != expected_type:
        return None
    return payload
