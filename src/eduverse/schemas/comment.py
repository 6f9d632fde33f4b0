"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel, SenderSnapshot


class CommentCreate(CamelModel):
    """Schema for commenting on a post."""

    post_id: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1, max_length=5000)
    parent_comment_id: str | None = None


class CommentResponse(CamelModel):
    """Schema for comment information returned by the API."""

    id: str
    post_id: str
    sender: SenderSnapshot
    body: str
    parent_comment_id: str | None = None
    created_at: datetime
