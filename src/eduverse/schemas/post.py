"""Post-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from .comment import CommentResponse
from .common import CamelModel, Pagination, SenderSnapshot
from .reaction import ReactionCounts

PostType = Literal["question", "announcement", "discussion", "event"]


class PostCreate(CamelModel):
    """Schema for creating a new post."""

    course_id: str | None = Field(None, max_length=64)
    title: str = Field("", max_length=300)
    body: str = Field(..., min_length=1, max_length=20000)
    type: PostType = "discussion"
    attachments_id: list[str] = Field(default_factory=list)
    deadline: datetime | None = None
    event_date: datetime | None = None
    event_location: str | None = Field(None, max_length=300)

    @field_validator("type", mode="before")
    @classmethod
    def lowercase_type(cls, v: object) -> object:
        """Accept post types in any letter case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class PostUpdate(CamelModel):
    """Fields the author may change after posting."""

    title: str | None = Field(None, max_length=300)
    body: str | None = Field(None, min_length=1, max_length=20000)
    answered: bool | None = None


class PostResponse(CamelModel):
    """Schema for post information returned by the API."""

    id: str
    sender: SenderSnapshot
    course_id: str | None
    title: str
    body: str
    type: str
    attachments_id: list[str]
    deadline: datetime | None = None
    event_date: datetime | None = None
    event_location: str | None = None
    answered: bool
    created_at: datetime


class PostDetailResponse(CamelModel):
    """A post with its comments and reaction counts."""

    post: PostResponse
    comments: list[CommentResponse]
    reactions: ReactionCounts
    user_reaction: str | None = None


class UserPostsResponse(CamelModel):
    """Paginated posts authored by one identity."""

    posts: list[PostResponse]
    pagination: Pagination
