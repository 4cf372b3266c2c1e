# diary models: entry creation, edit and response schemas
# documents are snake_case in mongodb, camelCase on the wire

from typing import Literal, Optional
from pydantic import BaseModel, Field

Visibility = Literal["private", "shared"]


class DiaryCreate(BaseModel):
    """payload for a new diary entry"""
    entry: str = Field(..., min_length=1, max_length=10000, description="diary body text")
    visibility: Visibility = "private"
    title: Optional[str] = Field(None, max_length=200, description="used when useAITitle is false")
    use_ai_title: bool = Field(True, alias="useAITitle")
    author_name: Optional[str] = Field(None, alias="authorName", max_length=100)

    model_config = {"populate_by_name": True}


class DiaryUpdate(BaseModel):
    """payload for editing an entry, every field optional"""
    title: Optional[str] = Field(None, max_length=200)
    entry: Optional[str] = Field(None, min_length=1, max_length=10000)
    use_ai_title: bool = Field(False, alias="useAITitle")
    visibility: Optional[Visibility] = None

    model_config = {"populate_by_name": True}


class DiaryEntryResponse(BaseModel):
    """full diary entry as returned to its owner or a share-link holder"""
    id: int
    user_id: str = Field(..., alias="userId")
    author_name: str = Field("", alias="authorName")
    title: str = ""
    date: str = ""
    emotion: str = ""
    entry: str = ""
    visibility: Visibility = "private"
    share_token: Optional[str] = Field(None, alias="shareToken")
    ai_feedback: Optional[str] = Field(None, alias="aiFeedback")
    ai_feedback_at: Optional[str] = Field(None, alias="aiFeedbackAt")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    model_config = {"populate_by_name": True}


class DiaryCreateResponse(BaseModel):
    message: str = "Diary entry saved successfully!"
    entry: DiaryEntryResponse


class DiaryListResponse(BaseModel):
    entries: list[DiaryEntryResponse]
    total: int
    page: int
    total_pages: int = Field(..., alias="totalPages")

    model_config = {"populate_by_name": True}


class SharedDiaryResponse(BaseModel):
    entry: DiaryEntryResponse
    share_link: str = Field(..., alias="shareLink")

    model_config = {"populate_by_name": True}


class MessageResponse(BaseModel):
    message: str
