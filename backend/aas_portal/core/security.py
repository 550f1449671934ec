"""
PIN hashing and session tokens.

PINs are stored as salted bcrypt hashes. Session tokens are HS256 JWTs that
carry only the user id and a token id; the user record itself is always read
back from the database.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import bcrypt
import jwt

logger = logging.getLogger(__name__)

TOKEN_TYPE = "session"

# Compared against when the phone number is unknown so both paths cost one bcrypt check
_DUMMY_HASH = bcrypt.hashpw(b"0000", bcrypt.gensalt()).decode("utf-8")


def hash_pin(pin: str) -> str:
    """Hash a PIN using bcrypt."""
    return bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_pin(pin: str, pin_hash: Optional[str]) -> bool:
    if not pin_hash:
        bcrypt.checkpw(pin.encode("utf-8"), _DUMMY_HASH.encode("utf-8"))
        return False
    try:
        return bcrypt.checkpw(pin.encode("utf-8"), pin_hash.encode("utf-8"))
    except ValueError as e:
        logger.warning(f"PIN check failed: invalid hash format ({e})")
        return False


def create_session_token(
    user_id: int,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60,
) -> Tuple[str, str, datetime]:
    """Return ``(token, jti, expires_at)`` for a new session."""
    jti = uuid.uuid4().hex
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {
        "sub": str(user_id),
        "jti": jti,
        "type": TOKEN_TYPE,
        "exp": expires_at,
    }
    token = jwt.encode(payload, secret_key, algorithm=algorithm)
    return token, jti, expires_at


def decode_session_token(token: str, secret_key: str, algorithm: str = "HS256") -> Optional[Dict[str, Any]]:
    """Decode a session token; anything unparseable, expired or of the wrong type yields None."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except jwt.PyJWTError as e:
        logger.debug(f"Discarding session token: {e}")
        return None
    if payload.get("type") != TOKEN_TYPE or "sub" not in payload or "jti" not in payload:
        return None
    return payload
