# auth router: oauth login, session check, profile, logout
# the server-issued session cookie is the only authority on who the user is

import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

from fastapi import APIRouter, Depends, Response, status

from mood_journal.config import settings
from mood_journal.dependencies import get_current_user
from mood_journal.errors import ApiError, OAuthVerificationError, bad_request
from mood_journal.models.user import LoginResponse, OAuthLogin, SessionResponse, UserResponse
from mood_journal.services.auth_service import create_session_token, session_claims
from mood_journal.services.db import Database, get_db
from mood_journal.services.oauth_service import verify_provider_token

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

PROVIDER_LABELS = {"google": "Google", "naver": "Naver"}


def _doc_to_user(doc: dict) -> UserResponse:
    return UserResponse(
        id=str(doc.get("id") or doc.get("_id")),
        email=doc.get("email", ""),
        name=doc.get("name", ""),
        avatar=doc.get("avatar"),
        provider=doc.get("provider", "google"),
        createdAt=doc.get("created_at"),
        lastLoginAt=doc.get("last_login_at"),
    )


def _cookie_options() -> dict:
    """cross-site cookies in production (separate client origin), lax locally"""
    return {
        "secure": settings.is_production,
        "samesite": "none" if settings.is_production else "lax",
        "path": "/",
    }


def _set_session_cookies(response: Response, token: str, name: str):
    options = _cookie_options()
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        httponly=True,
        max_age=int(timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS).total_seconds()),
        **options,
    )
    # readable by the client for display only, never trusted by the server
    response.set_cookie(
        settings.DISPLAY_NAME_COOKIE_NAME,
        quote(name or ""),
        httponly=False,
        max_age=int(timedelta(days=settings.DISPLAY_NAME_COOKIE_MAX_AGE_DAYS).total_seconds()),
        **options,
    )


async def _upsert_oauth_user(profile: dict, db: Database) -> dict:
    """find the user for this provider identity, creating it on first login"""
    now = datetime.now(timezone.utc).isoformat()
    user = await db.users.find_one({
        "provider": profile["provider"],
        "provider_id": profile["provider_id"],
    })

    if user is None:
        user = {
            "email": profile["email"],
            "name": profile["name"],
            "avatar": profile.get("avatar"),
            "provider": profile["provider"],
            "provider_id": profile["provider_id"],
            "created_at": now,
            "last_login_at": now,
        }
        result = await db.users.insert_one(user)
        user["_id"] = result.inserted_id
        logger.info(f"User created: {user['_id']} via {profile['provider']}")
    else:
        await db.users.update_one({"_id": user["_id"]}, {"$set": {"last_login_at": now}})
        user["last_login_at"] = now
        logger.info(f"User logged in: {user['_id']} via {profile['provider']}")

    return user


async def _oauth_login(provider: str, body: OAuthLogin, response: Response, db: Database) -> LoginResponse:
    if not body.access_token:
        raise bad_request(f"{PROVIDER_LABELS[provider]} access token is required.")

    try:
        profile = await verify_provider_token(provider, body.access_token)
    except OAuthVerificationError as e:
        logger.warning(f"{provider} login rejected: {e}")
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Login failed",
            f"{PROVIDER_LABELS[provider]} login failed.",
        )

    user = await _upsert_oauth_user(profile, db)
    token = create_session_token(session_claims(user))
    _set_session_cookies(response, token, user.get("name", ""))

    return LoginResponse(
        user=_doc_to_user(user),
        message=f"{PROVIDER_LABELS[provider]} login successful",
        accessToken=token,
    )


@router.post("/google", response_model=LoginResponse)
async def google_login(body: OAuthLogin, response: Response, db: Database = Depends(get_db)):
    """verify a google access/id token, create or update the user, start a session"""
    return await _oauth_login("google", body, response, db)


@router.post("/naver", response_model=LoginResponse)
async def naver_login(body: OAuthLogin, response: Response, db: Database = Depends(get_db)):
    """verify a naver access token, create or update the user, start a session"""
    return await _oauth_login("naver", body, response, db)


@router.get("/verify", response_model=SessionResponse)
async def verify_session(current_user: dict = Depends(get_current_user)):
    """revalidate the session, clients should treat any cached user as a hint until this succeeds"""
    return SessionResponse(user=_doc_to_user(current_user), message="Session is valid.")


@router.get("/profile", response_model=SessionResponse)
async def profile(current_user: dict = Depends(get_current_user)):
    return SessionResponse(user=_doc_to_user(current_user))


@router.post("/logout")
async def logout(response: Response):
    options = _cookie_options()
    response.delete_cookie(settings.SESSION_COOKIE_NAME, httponly=True, **options)
    response.delete_cookie(settings.DISPLAY_NAME_COOKIE_NAME, **options)
    return {"success": True}
