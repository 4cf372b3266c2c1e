# share router: open a shared entry directly by its share token

import logging

from fastapi import APIRouter, Depends, Request, status

from mood_journal.config import settings
from mood_journal.errors import ApiError
from mood_journal.models.diary import SharedDiaryResponse
from mood_journal.routers.diary import author_name_for, doc_to_entry
from mood_journal.services.access import build_share_link
from mood_journal.services.db import Database, get_db

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/share", tags=["share"])


@router.get("/{token}", response_model=SharedDiaryResponse)
async def get_shared_diary(
    token: str,
    request: Request,
    db: Database = Depends(get_db),
):
    """shared entry plus the link a reader can pass on"""

    entry = await db.diaries.find_one({"share_token": token, "visibility": "shared"})
    if not entry:
        raise ApiError(
            status.HTTP_404_NOT_FOUND,
            "Shared diary not found",
            "This link is invalid or the entry is no longer shared.",
        )

    origin = request.headers.get("origin") or settings.FRONTEND_URL
    return SharedDiaryResponse(
        entry=doc_to_entry(entry, author_name=await author_name_for(entry["user_id"], db)),
        shareLink=build_share_link(token, origin),
    )
