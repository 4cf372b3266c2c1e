# comments router: comments on shared entries
# both reading and writing need the entry's current share token, ownership alone is not enough

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from mood_journal.dependencies import get_entry_id
from mood_journal.errors import access_denied, bad_request, entry_not_found
from mood_journal.models.comment import (
    CommentCreate,
    CommentCreateResponse,
    CommentListResponse,
    CommentResponse,
)
from mood_journal.services.access import share_token_matches
from mood_journal.services.db import Database, get_db, next_sequence

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/diary", tags=["comments"])


def _doc_to_comment(doc: dict) -> CommentResponse:
    return CommentResponse(
        id=doc["id"],
        entryId=doc["entry_id"],
        authorName=doc.get("author_name"),
        content=doc.get("content", ""),
        createdAt=doc.get("created_at", ""),
    )


async def _require_shared_entry(entry_id: int, token: Optional[str], db: Database) -> dict:
    entry = await db.diaries.find_one({"id": entry_id})
    if not entry:
        raise entry_not_found()
    if not share_token_matches(entry, token):
        raise access_denied("A valid share link is required for comments.")
    return entry


@router.get("/{entry_id}/comments", response_model=CommentListResponse)
async def list_comments(
    entry_id: int = Depends(get_entry_id),
    token: Optional[str] = Query(None, description="share token"),
    db: Database = Depends(get_db),
):
    """comments left through the current share link, newest first"""

    await _require_shared_entry(entry_id, token, db)

    cursor = db.comments.find({"entry_id": entry_id, "share_token": token}).sort("created_at", -1)
    comments = []
    async for doc in cursor:
        comments.append(_doc_to_comment(doc))

    return CommentListResponse(comments=comments)


@router.post("/{entry_id}/comments", response_model=CommentCreateResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    body: CommentCreate,
    entry_id: int = Depends(get_entry_id),
    token: Optional[str] = Query(None, description="share token"),
    db: Database = Depends(get_db),
):
    """leave a comment on a shared entry"""

    await _require_shared_entry(entry_id, token, db)

    content = body.content.strip()
    if not content:
        raise bad_request("Content is required.")

    doc = {
        "id": await next_sequence(db, "comments"),
        "entry_id": entry_id,
        "share_token": token,
        "author_name": (body.author_name or "").strip() or None,
        "content": content,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    await db.comments.insert_one(doc)
    logger.info(f"Comment {doc['id']} added to diary {entry_id}")

    return CommentCreateResponse(comment=_doc_to_comment(doc))
