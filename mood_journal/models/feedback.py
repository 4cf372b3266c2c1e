# ai feedback models

from typing import Optional
from pydantic import BaseModel


class FeedbackRequest(BaseModel):
    """optional overrides for the stored entry text and emotion"""
    entry: Optional[str] = None
    emotion: Optional[str] = None


class FeedbackResponse(BaseModel):
    feedback: str
    locked: bool = True
    at: Optional[str] = None
