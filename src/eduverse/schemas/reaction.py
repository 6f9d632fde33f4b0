"""Reaction-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class ReactionCreate(CamelModel):
    """Schema for setting the caller's reaction on a post."""

    post_id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)


class ReactionResponse(CamelModel):
    """A stored reaction."""

    id: str
    post_id: str
    sender_id: str
    type: str
    created_at: datetime


class ReactionCounts(CamelModel):
    """Per-type reaction counts for a post; absent types count zero."""

    like: int = 0
    love: int = 0
    shocked: int = 0
    laugh: int = 0
    sad: int = 0


class ReactionSummaryResponse(CamelModel):
    """Counts for a post plus the caller's own reaction, if any."""

    reactions: ReactionCounts
    user_reaction: str | None = None
