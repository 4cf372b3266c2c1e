# oauth service: verifies provider tokens and normalizes the profile
# google: access tokens via userinfo, id tokens via tokeninfo. naver: profile api

import logging
from typing import Optional

import httpx

from mood_journal.config import settings
from mood_journal.errors import OAuthVerificationError

logger = logging.getLogger(__name__)

GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
NAVER_PROFILE_URL = "https://openapi.naver.com/v1/nid/me"

# google oauth access tokens carry this prefix, anything else is treated as an id token
GOOGLE_ACCESS_TOKEN_PREFIX = "ya29."


async def _get_json(url: str, headers: Optional[dict] = None, params: Optional[dict] = None) -> dict:
    try:
        async with httpx.AsyncClient(timeout=settings.OAUTH_HTTP_TIMEOUT) as client:
            resp = await client.get(url, headers=headers, params=params)
    except httpx.HTTPError as e:
        raise OAuthVerificationError(f"provider request failed: {e}") from e

    if resp.status_code != 200:
        raise OAuthVerificationError(f"provider rejected token (status {resp.status_code})")
    try:
        return resp.json()
    except ValueError as e:
        raise OAuthVerificationError("provider returned invalid json") from e


async def verify_google_token(token: str) -> dict:
    """google profile for an access token or id token"""
    if token.startswith(GOOGLE_ACCESS_TOKEN_PREFIX):
        data = await _get_json(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
        )
    else:
        data = await _get_json(GOOGLE_TOKENINFO_URL, params={"id_token": token})
        if settings.GOOGLE_CLIENT_ID and data.get("aud") != settings.GOOGLE_CLIENT_ID:
            raise OAuthVerificationError("google id token audience mismatch")

    if not data.get("sub") or not data.get("email"):
        raise OAuthVerificationError("google profile is missing id or email")

    return {
        "id": data["sub"],
        "email": data["email"],
        "name": data.get("name") or data["email"].split("@")[0],
        "picture": data.get("picture"),
    }


async def verify_naver_token(token: str) -> dict:
    """naver profile for an access token"""
    data = await _get_json(NAVER_PROFILE_URL, headers={"Authorization": f"Bearer {token}"})

    # naver wraps results: {"resultcode": "00", "message": "success", "response": {...}}
    if data.get("resultcode") != "00":
        raise OAuthVerificationError(f"naver rejected token: {data.get('message')}")
    profile = data.get("response") or {}
    if not profile.get("id") or not profile.get("email"):
        raise OAuthVerificationError("naver profile is missing id or email")

    return {
        "id": profile["id"],
        "email": profile["email"],
        "name": profile.get("name") or profile.get("nickname") or profile["email"].split("@")[0],
        "picture": profile.get("profile_image"),
    }


def normalize_oauth_user(provider: str, user_data: dict) -> dict:
    """provider profile -> fields stored on the user document"""
    return {
        "provider": provider,
        "provider_id": str(user_data["id"]),
        "email": str(user_data["email"]).strip().lower(),
        "name": str(user_data.get("name") or "").strip(),
        "avatar": user_data.get("picture"),
    }


VERIFIERS = {
    "google": verify_google_token,
    "naver": verify_naver_token,
}


async def verify_provider_token(provider: str, token: str) -> dict:
    """verify a token with the given provider and return the normalized profile"""
    verifier = VERIFIERS.get(provider)
    if verifier is None:
        raise OAuthVerificationError(f"unsupported provider: {provider}")
    user_data = await verifier(token)
    logger.info(f"{provider} token verified for provider id {user_data['id']}")
    return normalize_oauth_user(provider, user_data)
