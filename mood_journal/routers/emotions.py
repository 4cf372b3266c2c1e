# emotions router: the caller's emotion analyses and aggregate stats

import logging

from fastapi import APIRouter, Depends, Query

from mood_journal.dependencies import get_current_user
from mood_journal.models.emotion import EmotionAnalysisResponse, EmotionStatsResponse
from mood_journal.services.db import Database, get_db
from mood_journal.services.emotion_service import get_latest_emotion_analyses, get_overall_emotion_stats

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/emotions", tags=["emotions"])


@router.get("/analysis", response_model=list[EmotionAnalysisResponse])
async def latest_analyses(
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    analyses = await get_latest_emotion_analyses(db, current_user["id"], limit=limit)
    return [EmotionAnalysisResponse(**a) for a in analyses]


@router.get("/stats", response_model=EmotionStatsResponse)
async def emotion_stats(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """average emotion ratios and the per-entry trend line"""
    stats = await get_overall_emotion_stats(db, current_user["id"])
    return EmotionStatsResponse(
        totalEntries=stats["total_entries"],
        averageEmotions=stats["average_emotions"],
        emotionTrends=[EmotionAnalysisResponse(**t) for t in stats["emotion_trends"]],
    )
