"""Validation and storage of uploaded attachments."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from eduverse.core.settings import settings
from eduverse.models import File

logger = logging.getLogger(__name__)

__all__ = [
    "ALLOWED_MIME_TYPES",
    "UploadRejected",
    "UnsupportedMediaTypeError",
    "PayloadTooLargeError",
    "classify_mime",
    "store_upload",
]

# MIME type -> coarse file type exposed to clients.
ALLOWED_MIME_TYPES: dict[str, str] = {
    "image/jpeg": "image",
    "image/png": "image",
    "image/gif": "image",
    "image/webp": "image",
    "application/pdf": "pdf",
    "application/msword": "word",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "word",
}


class UploadRejected(ValueError):
    """Base class for rejected uploads."""


class UnsupportedMediaTypeError(UploadRejected):
    """Raised for MIME types outside the allow-list."""


class PayloadTooLargeError(UploadRejected):
    """Raised when the payload exceeds the configured size limit."""


def classify_mime(mime_type: str | None) -> str:
    """Map an allowed MIME type to ``image``, ``pdf`` or ``word``.

    Raises:
        UnsupportedMediaTypeError: If the type is not allowed.
    """
    normalized = (mime_type or "").split(";", 1)[0].strip().lower()
    try:
        return ALLOWED_MIME_TYPES[normalized]
    except KeyError:
        raise UnsupportedMediaTypeError("Invalid file type") from None


def store_upload(
    db: Session,
    *,
    file_name: str,
    mime_type: str | None,
    data: bytes,
    uploader_id: str,
    course_id: str | None = None,
    post_id: str | None = None,
    message_id: str | None = None,
) -> File:
    """Validate an upload and persist it.

    The type check runs before the size check and nothing is written when
    either fails.

    Raises:
        UnsupportedMediaTypeError: MIME type not allowed.
        PayloadTooLargeError: More than ``MAX_UPLOAD_BYTES``.
    """
    file_type = classify_mime(mime_type)
    if len(data) > settings.max_upload_bytes:
        raise PayloadTooLargeError("File too large")

    record = File(
        file_name=file_name,
        file_type=file_type,
        mime_type=(mime_type or "").split(";", 1)[0].strip().lower(),
        file_data=data,
        size=len(data),
        uploader_id=uploader_id,
        course_id=course_id,
        post_id=post_id,
        message_id=message_id,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Stored %s upload %s (%d bytes) for %s", file_type, record.id, record.size, uploader_id)
    return record
