"""Attachment upload and download endpoints."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile, status
from sqlalchemy import select

from eduverse.core.settings import settings
from eduverse.models import File as FileRecord
from eduverse.schemas.common import StatusMessage
from eduverse.schemas.file import FileResponse
from eduverse.services.files import (
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    store_upload,
)

from ..dependencies import CurrentUserDep, InstructorDep, SessionDep

router = APIRouter(prefix="/files", tags=["files"])


@router.post("", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    current_user: CurrentUserDep,
    db: SessionDep,
    file: UploadFile | None = File(None),
    course_id: str | None = Form(None, alias="courseId"),
    post_id: str | None = Form(None, alias="postId"),
    message_id: str | None = Form(None, alias="messageId"),
) -> FileResponse:
    """Store an image, PDF or Word document."""
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    # One byte past the limit is enough to reject oversized payloads.
    contents = await file.read(settings.max_upload_bytes + 1)
    try:
        record = store_upload(
            db,
            file_name=file.filename,
            mime_type=file.content_type,
            data=contents,
            uploader_id=current_user.id,
            course_id=course_id,
            post_id=post_id,
            message_id=message_id,
        )
    except UnsupportedMediaTypeError as exc:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=str(exc),
        ) from exc
    except PayloadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    return FileResponse.model_validate(record)


@router.get("/course/{course_id}", response_model=list[FileResponse])
async def list_course_files(
    course_id: str,
    _: CurrentUserDep,
    db: SessionDep,
) -> list[FileResponse]:
    """Metadata of files attached to a course, newest first."""
    records = db.scalars(
        select(FileRecord)
        .where(FileRecord.course_id == course_id)
        .order_by(FileRecord.created_at.desc())
    ).all()
    return [FileResponse.model_validate(record) for record in records]


@router.get("/{file_id}")
async def download_file(file_id: str, db: SessionDep) -> Response:
    """Return the stored bytes as an attachment."""
    record = db.get(FileRecord, file_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return Response(
        content=record.file_data,
        media_type=record.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(record.file_name)}",
        },
    )


@router.delete("/{file_id}", response_model=StatusMessage)
async def delete_file(file_id: str, _: InstructorDep, db: SessionDep) -> StatusMessage:
    """Remove a stored file."""
    record = db.get(FileRecord, file_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    db.delete(record)
    db.commit()
    return StatusMessage(message="File deleted")
