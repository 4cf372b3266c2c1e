# ai feedback: generated at most once per entry, then read-only
#
# flow:
#   1. stored feedback present -> return it, no generation, no write
#   2. otherwise generate from the effective entry text and emotion
#   3. persist with a conditional update that only matches while feedback is unset
#   4. if the conditional update lost to a concurrent request, return the winner's text

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from pymongo import ReturnDocument

from mood_journal.services.db import Database

logger = logging.getLogger(__name__)

FeedbackGenerator = Callable[[str, str], Awaitable[str]]

# matches a missing field, an explicit null and an empty string
UNSET_FEEDBACK = {"$in": [None, ""]}


@dataclass
class FeedbackResult:
    feedback: str
    at: Optional[str]
    generated: bool
    locked: bool = True


class EntryNotFound(Exception):
    """no diary entry with the requested id"""


def _stored(doc: dict) -> FeedbackResult:
    return FeedbackResult(feedback=doc["ai_feedback"], at=doc.get("ai_feedback_at"), generated=False)


async def get_or_create_feedback(
    db: Database,
    entry_id: int,
    generate: FeedbackGenerator,
    entry_text: Optional[str] = None,
    emotion: Optional[str] = None,
) -> FeedbackResult:
    """return the entry's feedback, generating and persisting it on the first call.

    raises EntryNotFound when the entry is missing. errors from `generate` propagate
    unchanged and leave the entry untouched so the caller can retry later.
    """
    entry = await db.diaries.find_one({"id": entry_id})
    if not entry:
        raise EntryNotFound(entry_id)

    if entry.get("ai_feedback"):
        return _stored(entry)

    text = entry_text if entry_text is not None else entry.get("entry", "")
    mood = emotion if emotion is not None else entry.get("emotion", "")
    feedback = await generate(text, mood)

    now = datetime.now(timezone.utc).isoformat()
    updated = await db.diaries.find_one_and_update(
        {"id": entry_id, "ai_feedback": UNSET_FEEDBACK},
        {"$set": {"ai_feedback": feedback, "ai_feedback_at": now}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is not None:
        logger.info(f"AI feedback stored for diary {entry_id}")
        return FeedbackResult(feedback=feedback, at=now, generated=True)

    # another request stored its feedback first (or the entry vanished meanwhile)
    current = await db.diaries.find_one({"id": entry_id})
    if not current:
        raise EntryNotFound(entry_id)
    if current.get("ai_feedback"):
        logger.info(f"AI feedback for diary {entry_id} already stored by a concurrent request")
        return _stored(current)
    raise RuntimeError(f"conditional feedback update for diary {entry_id} matched nothing")
