# emotion analysis models: per-entry emotion ratios and aggregate stats

from pydantic import BaseModel, Field


class EmotionAnalysisResponse(BaseModel):
    """emotion ratios (0-100) for a single diary entry"""
    date: str
    emotions: dict[str, float] = Field(default_factory=dict)


class EmotionStatsResponse(BaseModel):
    total_entries: int = Field(0, alias="totalEntries")
    average_emotions: dict[str, float] = Field(default_factory=dict, alias="averageEmotions")
    emotion_trends: list[EmotionAnalysisResponse] = Field(default_factory=list, alias="emotionTrends")

    model_config = {"populate_by_name": True}
