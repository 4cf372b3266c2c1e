# comment models: comments live only behind a share link

from typing import Optional
from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    content: str = Field("", max_length=1000)
    author_name: Optional[str] = Field(None, alias="authorName", max_length=100)

    model_config = {"populate_by_name": True}


class CommentResponse(BaseModel):
    id: int
    entry_id: int = Field(..., alias="entryId")
    author_name: Optional[str] = Field(None, alias="authorName")
    content: str
    created_at: str = Field("", alias="createdAt")

    model_config = {"populate_by_name": True}


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]


class CommentCreateResponse(BaseModel):
    comment: CommentResponse
