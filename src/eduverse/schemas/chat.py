"""Chat-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel, Pagination, SenderSnapshot


class ChatCreate(CamelModel):
    """Open (or fetch) the chat with another user."""

    user2_id: str = Field(..., min_length=1)


class ChatResponse(CamelModel):
    """Schema for chat information returned by the API."""

    id: str
    user1: SenderSnapshot
    user2: SenderSnapshot
    last_message: str
    updated_at: datetime


class ChatListResponse(CamelModel):
    """Paginated chats of the caller."""

    chats: list[ChatResponse]
    pagination: Pagination
