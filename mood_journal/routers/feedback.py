# ai feedback router: written feedback on a diary entry, generated once and then locked

import logging

from fastapi import APIRouter, Depends, status

from mood_journal.dependencies import get_entry_id
from mood_journal.errors import ApiError, GenerationError, entry_not_found
from mood_journal.models.feedback import FeedbackRequest, FeedbackResponse
from mood_journal.services.db import Database, get_db
from mood_journal.services.feedback_service import EntryNotFound, get_or_create_feedback
from mood_journal.services.llm_service import generate_feedback

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/diary", tags=["ai-feedback"])


# no session required: anyone who knows an id can read its stored feedback
@router.post("/{entry_id}/ai-feedback", response_model=FeedbackResponse)
async def ai_feedback(
    body: FeedbackRequest | None = None,
    entry_id: int = Depends(get_entry_id),
    db: Database = Depends(get_db),
):
    """return the entry's ai feedback, generating it on the first request.

    once stored, feedback is never regenerated. a failed generation stores
    nothing, so the client may simply try again.
    """
    body = body or FeedbackRequest()

    try:
        result = await get_or_create_feedback(
            db,
            entry_id,
            generate_feedback,
            entry_text=body.entry,
            emotion=body.emotion,
        )
    except EntryNotFound:
        raise entry_not_found()
    except GenerationError:
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to generate AI feedback",
            "Feedback could not be generated right now. Please try again.",
        )

    return FeedbackResponse(feedback=result.feedback, locked=result.locked, at=result.at)
