# access decision for diary entries
# owner identity first, then the share-link capability, otherwise deny

import logging
import secrets
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

SHARE_TOKEN_BYTES = 16


class AccessDecision(str, Enum):
    ALLOW_OWNER = "allow_owner"
    ALLOW_SHARE_TOKEN = "allow_share_token"
    DENY = "deny"

    @property
    def allowed(self) -> bool:
        return self is not AccessDecision.DENY


def generate_share_token() -> str:
    """32 hex characters of randomness"""
    return secrets.token_hex(SHARE_TOKEN_BYTES)


def build_share_link(token: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/shared/{token}"


def is_owner(entry: dict, user_id: Optional[str]) -> bool:
    return bool(user_id) and user_id == entry.get("user_id")


def share_token_matches(entry: dict, token: Optional[str]) -> bool:
    """true only while the entry is shared and the supplied token is an exact match.
    a token retained from an earlier share stops working once the entry goes private"""
    stored = entry.get("share_token")
    if entry.get("visibility") != "shared" or not stored or not token:
        return False
    return secrets.compare_digest(str(token).encode(), str(stored).encode())


def decide_read_access(entry: dict, user_id: Optional[str], token: Optional[str]) -> AccessDecision:
    """who may read an entry, first match wins:

    1. the verified owner, regardless of visibility or token
    2. anyone holding the current share token of a shared entry
    3. nobody else

    `user_id` must already be verified; an unverifiable session arrives here as None.
    """
    if is_owner(entry, user_id):
        return AccessDecision.ALLOW_OWNER
    if share_token_matches(entry, token):
        return AccessDecision.ALLOW_SHARE_TOKEN
    return AccessDecision.DENY
