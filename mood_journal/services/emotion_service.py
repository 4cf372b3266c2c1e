# emotion analytics: per-entry emotion ratios and per-user aggregates
# analyses are written when an entry is saved and read by the stats endpoints

import logging
from datetime import datetime, timezone

from mood_journal.services.db import Database
from mood_journal.services.llm_service import analyze_emotion

logger = logging.getLogger(__name__)


async def save_emotion_analysis(db: Database, diary_id: int, user_id: str, date: str, entry: str) -> dict[str, float]:
    """analyze an entry and upsert its emotion ratios"""
    emotions = await analyze_emotion(entry)
    await db.emotion_analyses.update_one(
        {"diary_id": diary_id},
        {"$set": {
            "diary_id": diary_id,
            "user_id": user_id,
            "date": date,
            "emotions": emotions,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }},
        upsert=True,
    )
    logger.info(f"Emotion analysis saved for diary {diary_id}: {len(emotions)} emotions")
    return emotions


async def get_latest_emotion_analyses(db: Database, user_id: str, limit: int = 10) -> list[dict]:
    """most recent analyses for a user, newest first"""
    cursor = db.emotion_analyses.find({"user_id": user_id}).sort("created_at", -1).limit(limit)
    analyses = []
    async for doc in cursor:
        analyses.append({"date": doc.get("date", ""), "emotions": doc.get("emotions") or {}})
    return analyses


def compute_emotion_stats(analyses: list[dict]) -> dict:
    """average each emotion over all analyses. an emotion missing from an
    analysis counts as 0 for that analysis"""
    if not analyses:
        return {"total_entries": 0, "average_emotions": {}, "emotion_trends": []}

    all_emotions: list[str] = []
    for analysis in analyses:
        for name in analysis["emotions"]:
            if name not in all_emotions:
                all_emotions.append(name)

    total = len(analyses)
    average_emotions = {
        name: round(sum(a["emotions"].get(name, 0) for a in analyses) / total, 2)
        for name in all_emotions
    }

    return {
        "total_entries": total,
        "average_emotions": average_emotions,
        "emotion_trends": analyses,
    }


async def get_overall_emotion_stats(db: Database, user_id: str) -> dict:
    """aggregate stats over all of a user's analyses, trends in date order"""
    cursor = db.emotion_analyses.find({"user_id": user_id}).sort("created_at", 1)
    analyses = []
    async for doc in cursor:
        analyses.append({"date": doc.get("date", ""), "emotions": doc.get("emotions") or {}})
    return compute_emotion_stats(analyses)
