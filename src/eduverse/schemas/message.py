"""Message-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel, SenderSnapshot


class MessageCreate(CamelModel):
    """Schema for sending a direct message."""

    chat_id: str | None = None
    receiver_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1, max_length=10000)
    attachments_id: list[str] = Field(default_factory=list)
    reply_to: str | None = None


class MessageResponse(CamelModel):
    """Schema for message information returned by the API."""

    id: str
    chat_id: str
    sender: SenderSnapshot
    receiver_id: str
    text: str
    attachments_id: list[str]
    reply_to: str | None = None
    created_at: datetime
