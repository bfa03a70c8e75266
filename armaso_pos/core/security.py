"""Security utilities: password hashing and signed session tokens."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt
from jwt.exceptions import PyJWTError

from armaso_pos.core.config import settings

logger = logging.getLogger(__name__)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hash.

    Uses bcrypt's built-in timing-safe comparison.
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError as e:
        logger.warning(f"Password verification error: {e}")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt()
    ).decode('utf-8')


def create_session_token(user_id: int, username: str, expires_delta: timedelta | None = None) -> str:
    """Create the signed token stored in the session cookie."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.session_max_age_days))
    payload = {
        "sub": str(user_id),
        "username": username,
        "exp": expire,
        "iat": now,
        "jti": secrets.token_urlsafe(16),  # unique token ID for revocation
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_session_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a session token. Returns None if invalid or revoked."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": ["exp", "sub"]},
        )
    except PyJWTError as e:
        logger.debug(f"Session token rejected: {e}")
        return None

    jti = payload.get("jti")
    if jti and _is_token_revoked(jti):
        logger.debug(f"Session token {jti} has been revoked")
        return None
    return payload


def revoke_session_token(token: str) -> bool:
    """Revoke a session token until it would have expired anyway."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"verify_exp": False},
        )
    except PyJWTError:
        return False

    jti = payload.get("jti")
    if not jti:
        return False

    now = datetime.now(timezone.utc)
    _purge_expired_revocations(now)
    exp = payload.get("exp", 0)
    ttl = max(int(exp - now.timestamp()), 60)
    _revoked_tokens[jti] = now + timedelta(seconds=ttl)
    return True


def _purge_expired_revocations(now: datetime) -> None:
    for jti, expiry in list(_revoked_tokens.items()):
        if expiry <= now:
            _revoked_tokens.pop(jti, None)


def _is_token_revoked(jti: str) -> bool:
    expiry = _revoked_tokens.get(jti)
    if expiry is None:
        return False
    if datetime.now(timezone.utc) < expiry:
        return True
    _revoked_tokens.pop(jti, None)
    return False


# In-process revocation list (cleared on restart)
_revoked_tokens: Dict[str, datetime] = {}
