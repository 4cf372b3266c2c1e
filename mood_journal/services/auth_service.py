# auth service: session jwt management
# the session token is the single source of truth for "who is the current user"

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from mood_journal.config import settings

logger = logging.getLogger(__name__)


def create_session_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """create a signed session token. `data` must carry the user id in `sub`"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS)
    )
    to_encode.update({"exp": expire, "type": "session"})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def session_claims(user: dict) -> dict:
    """claims embedded in a session token for a stored user document"""
    return {
        "sub": str(user["_id"]),
        "email": user.get("email", ""),
        "name": user.get("name", ""),
        "provider": user.get("provider", ""),
    }


def decode_token(token: str) -> Optional[dict]:
    """decode and validate a jwt token, returns payload or none"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError as e:
        logger.warning(f"Token decode failed: {e}")
        return None


def session_user_id(token: Optional[str]) -> Optional[str]:
    """user id from a session token, or none when missing, invalid, expired or of the wrong type"""
    if not token:
        return None
    payload = decode_token(token)
    if payload is None or payload.get("type") != "session":
        return None
    return payload.get("sub") or None
