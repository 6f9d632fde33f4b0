"""File-related Pydantic schemas."""

from datetime import datetime

from .common import CamelModel


class FileResponse(CamelModel):
    """Metadata of an uploaded file (never the payload)."""

    id: str
    file_name: str
    file_type: str
    size: int
    created_at: datetime
