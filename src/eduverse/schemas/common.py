"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys.

    Requests accept both ``course_id`` and ``courseId`` spellings.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    """Page metadata returned by paginated list endpoints."""

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> Pagination:
        """Compute the page count for ``total`` items."""
        return cls(page=page, limit=limit, total=total, pages=-(-total // limit))


class SenderSnapshot(CamelModel):
    """Identity fields embedded in posts, comments, chats and messages."""

    id: str
    name: str
    image_id: str | None = None


class StatusMessage(CamelModel):
    """Simple acknowledgement payload."""

    success: bool = True
    message: str
