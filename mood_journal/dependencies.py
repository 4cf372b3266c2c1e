# fastapi dependency injection
# session extraction (cookie or bearer), current user lookup and diary id parsing

import logging
import re
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, Path, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from mood_journal.config import settings
from mood_journal.errors import invalid_entry_id, not_authenticated
from mood_journal.services.auth_service import session_user_id
from mood_journal.services.db import Database, get_db

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ENTRY_ID_PATTERN = re.compile(r"[0-9]+")


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """raw session token.

    the httponly cookie wins over the authorization header when both verify.
    a cookie that does not verify falls back to the bearer token, so a stale
    cookie never hides a valid header session.
    """
    candidates = [
        request.cookies.get(settings.SESSION_COOKIE_NAME),
        credentials.credentials if credentials is not None else None,
    ]
    present = [token for token in candidates if token]
    for token in present:
        if session_user_id(token) is not None:
            return token
    # nothing verifies, hand back the first one so callers report it as invalid
    return present[0] if present else None


def get_optional_user_id(token: Optional[str] = Depends(get_session_token)) -> Optional[str]:
    """caller identity if the session verifies. failures are treated as anonymous, never raised"""
    return session_user_id(token)


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    db: Database = Depends(get_db),
) -> dict:
    """validate the session and re-load the user from the database on every request"""
    if not token:
        raise not_authenticated()

    user_id = session_user_id(token)
    if user_id is None:
        raise not_authenticated("Invalid or expired session.")

    try:
        user = await db.users.find_one({"_id": ObjectId(user_id)})
    except InvalidId:
        user = None

    if not user:
        raise not_authenticated("User not found.")

    # convert _id to string
    user["id"] = str(user["_id"])
    del user["_id"]
    return user


def get_entry_id(entry_id: str = Path(..., description="numeric diary id")) -> int:
    """numeric diary id from the path. anything but plain ascii digits is a 400 before any lookup"""
    # int() alone would accept "4_2", " 42" and non-ascii digits
    if not ENTRY_ID_PATTERN.fullmatch(entry_id):
        raise invalid_entry_id()
    return int(entry_id)
