# diary router: create, list, read, edit and delete diary entries
# reads are open to the owner and to share-link holders, writes are owner-only

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, Query, status
from pymongo import ReturnDocument

from mood_journal.dependencies import get_current_user, get_entry_id, get_optional_user_id
from mood_journal.errors import GenerationError, ApiError, access_denied, bad_request, entry_not_found
from mood_journal.models.diary import (
    DiaryCreate,
    DiaryCreateResponse,
    DiaryEntryResponse,
    DiaryListResponse,
    DiaryUpdate,
    MessageResponse,
)
from mood_journal.services.access import decide_read_access, generate_share_token, is_owner
from mood_journal.services.db import Database, get_db, next_sequence
from mood_journal.services.emotion_service import save_emotion_analysis
from mood_journal.services.llm_service import convert_emotion_to_emoji, summarize_title

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/diary", tags=["diary"])

DATE_FORMAT = "%Y-%m-%d %H:%M"


def doc_to_entry(doc: dict, author_name: Optional[str] = None) -> DiaryEntryResponse:
    """convert a mongodb diary document to the response model"""
    return DiaryEntryResponse(
        id=doc["id"],
        userId=doc.get("user_id", ""),
        authorName=author_name or doc.get("author_name", ""),
        title=doc.get("title", ""),
        date=doc.get("date", ""),
        emotion=doc.get("emotion", ""),
        entry=doc.get("entry", ""),
        visibility=doc.get("visibility", "private"),
        shareToken=doc.get("share_token"),
        aiFeedback=doc.get("ai_feedback") or None,
        aiFeedbackAt=doc.get("ai_feedback_at"),
        createdAt=doc.get("created_at"),
        updatedAt=doc.get("updated_at"),
    )


async def author_name_for(user_id: str, db: Database) -> Optional[str]:
    """current display name of an entry's author, none if the user can't be found"""
    try:
        user = await db.users.find_one({"_id": ObjectId(user_id)}, {"name": 1})
    except InvalidId:
        return None
    return user.get("name") if user else None


async def load_entry(entry_id: int, db: Database) -> dict:
    entry = await db.diaries.find_one({"id": entry_id})
    if not entry:
        raise entry_not_found()
    return entry


async def load_owned_entry(entry_id: int, current_user: dict, db: Database) -> dict:
    entry = await load_entry(entry_id, db)
    if not is_owner(entry, current_user["id"]):
        raise access_denied("Only the author can modify this entry.")
    return entry


@router.post("", response_model=DiaryCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_diary(
    body: DiaryCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """save a new entry. gemini writes the title (unless the user supplies one) and picks the emoji"""

    if not body.use_ai_title and not (body.title and body.title.strip()):
        raise bad_request("Title is required when not using AI.")

    try:
        title = await summarize_title(body.entry) if body.use_ai_title else body.title.strip()
        emotion = await convert_emotion_to_emoji(body.entry)
    except GenerationError:
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to save diary entry",
            "Could not analyze the entry. Please try again.",
        )

    now = datetime.now(timezone.utc)
    entry_id = await next_sequence(db, "diaries")
    doc = {
        "id": entry_id,
        "user_id": current_user["id"],
        "author_name": (body.author_name or "").strip() or current_user.get("name", ""),
        "title": title,
        "date": now.strftime(DATE_FORMAT),
        "emotion": emotion,
        "entry": body.entry,
        "visibility": body.visibility,
        "created_at": now.isoformat(),
        "updated_at": now.isoformat(),
    }
    if body.visibility == "shared":
        doc["share_token"] = generate_share_token()

    await db.diaries.insert_one(doc)
    logger.info(f"Diary created: {entry_id} by user {current_user['id']}")

    # emotion ratios feed the stats page, a failure here must not lose the entry
    try:
        await save_emotion_analysis(db, entry_id, current_user["id"], doc["date"], body.entry)
    except GenerationError as e:
        logger.warning(f"Could not analyze emotions for diary {entry_id}: {e}")

    return DiaryCreateResponse(entry=doc_to_entry(doc))


@router.get("", response_model=DiaryListResponse)
async def list_diaries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    visibility: Optional[str] = Query(None, description="private or shared"),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """the caller's own entries, newest first"""

    query: dict = {"user_id": current_user["id"]}
    if visibility in ("private", "shared"):
        query["visibility"] = visibility

    cursor = db.diaries.find(query).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    entries = []
    async for doc in cursor:
        entries.append(doc_to_entry(doc, author_name=current_user.get("name")))

    total = await db.diaries.count_documents(query)

    return DiaryListResponse(
        entries=entries,
        total=total,
        page=page,
        totalPages=math.ceil(total / limit),
    )


@router.get("/{entry_id}", response_model=DiaryEntryResponse)
async def get_diary(
    entry_id: int = Depends(get_entry_id),
    token: Optional[str] = Query(None, description="share token"),
    user_id: Optional[str] = Depends(get_optional_user_id),
    db: Database = Depends(get_db),
):
    """read one entry. the owner always gets in, others need the entry's current share token"""

    entry = await load_entry(entry_id, db)

    decision = decide_read_access(entry, user_id, token)
    if not decision.allowed:
        logger.info(f"Read denied for diary {entry_id} (user={user_id}, token supplied={bool(token)})")
        raise access_denied()

    return doc_to_entry(entry, author_name=await author_name_for(entry["user_id"], db))


@router.put("/{entry_id}", response_model=DiaryEntryResponse)
async def update_diary(
    body: DiaryUpdate,
    entry_id: int = Depends(get_entry_id),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """edit an entry. ai feedback is never touched by an edit"""

    existing = await load_owned_entry(entry_id, current_user, db)

    title = body.title if body.title is not None else existing.get("title", "")
    emotion = existing.get("emotion", "")

    if body.use_ai_title:
        # regenerate both title and emoji from the effective body
        source = body.entry if body.entry is not None else existing.get("entry", "")
        try:
            title = await summarize_title(source)
            emotion = await convert_emotion_to_emoji(source)
        except GenerationError as e:
            logger.warning(f"AI title/emotion regeneration failed for diary {entry_id}, keeping previous: {e}")
            title = body.title if body.title is not None else existing.get("title", "")
            emotion = existing.get("emotion", "")
    elif body.entry is not None:
        try:
            emotion = await convert_emotion_to_emoji(body.entry)
        except GenerationError as e:
            logger.warning(f"Emotion regeneration failed for diary {entry_id}, keeping previous: {e}")

    update_fields = {
        "title": title,
        "emotion": emotion,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    if body.entry is not None:
        update_fields["entry"] = body.entry
    if body.visibility == "shared":
        update_fields["visibility"] = "shared"
        # re-sharing reuses a retained token so earlier links keep working
        if not existing.get("share_token"):
            update_fields["share_token"] = generate_share_token()
    elif body.visibility == "private":
        update_fields["visibility"] = "private"

    updated = await db.diaries.find_one_and_update(
        {"id": entry_id},
        {"$set": update_fields},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise entry_not_found()

    logger.info(f"Diary edited: {entry_id} by user {current_user['id']}")
    return doc_to_entry(updated, author_name=current_user.get("name"))


@router.delete("/{entry_id}", response_model=MessageResponse)
async def delete_diary(
    entry_id: int = Depends(get_entry_id),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """hard delete an entry and its emotion analysis"""

    await load_owned_entry(entry_id, current_user, db)

    await db.diaries.delete_one({"id": entry_id})
    await db.emotion_analyses.delete_one({"diary_id": entry_id})

    logger.info(f"Diary deleted: {entry_id} by user {current_user['id']}")
    return MessageResponse(message="Diary entry deleted.")
