# tests/v1/test_files.py
"""Tests for attachment upload and download."""

from fastapi import status

from eduverse.core.settings import settings
from eduverse.models import File


def _upload(client, headers, name: str, content: bytes, mime: str, **form):
    return client.post(
        "/api/files",
        files={"file": (name, content, mime)},
        data=form,
        headers=headers,
    )


def test_upload_and_download_pdf(client, db_session, auth_token) -> None:
    response = _upload(client, auth_token, "notes.pdf", b"%PDF-1.4 notes", "application/pdf", courseId="CS101")

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["fileName"] == "notes.pdf"
    assert data["fileType"] == "pdf"
    assert data["size"] == len(b"%PDF-1.4 notes")

    download = client.get(f"/api/files/{data['id']}")
    assert download.status_code == status.HTTP_200_OK
    assert download.content == b"%PDF-1.4 notes"
    assert download.headers["content-type"] == "application/pdf"
    assert download.headers["content-disposition"].startswith("attachment")


def test_word_and_image_types(client, auth_token) -> None:
    docx = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    assert _upload(client, auth_token, "a.docx", b"PK..", docx).json()["fileType"] == "word"
    assert _upload(client, auth_token, "a.png", b"\x89PNG", "image/png").json()["fileType"] == "image"


def test_zip_upload_rejected_without_record(client, db_session, auth_token) -> None:
    response = _upload(client, auth_token, "archive.zip", b"PK\x03\x04", "application/zip")

    assert response.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    assert db_session.query(File).count() == 0


def test_oversized_upload_rejected(client, db_session, auth_token, monkeypatch) -> None:
    monkeypatch.setattr(settings, "max_upload_bytes", 8)

    response = _upload(client, auth_token, "big.pdf", b"0123456789", "application/pdf")

    assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    assert db_session.query(File).count() == 0


def test_type_checked_before_size(client, auth_token, monkeypatch) -> None:
    monkeypatch.setattr(settings, "max_upload_bytes", 8)

    response = _upload(client, auth_token, "big.zip", b"0123456789", "application/zip")
    assert response.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


def test_upload_requires_file(client, auth_token) -> None:
    response = client.post("/api/files", data={"courseId": "CS101"}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_list_course_files(client, auth_token) -> None:
    _upload(client, auth_token, "a.pdf", b"%PDF", "application/pdf", courseId="CS101")
    _upload(client, auth_token, "b.pdf", b"%PDF", "application/pdf", courseId="CS999")

    response = client.get("/api/files/course/CS101", headers=auth_token)
    assert [item["fileName"] for item in response.json()] == ["a.pdf"]


def test_delete_file_requires_instructor(client, auth_token, instructor_token) -> None:
    file_id = _upload(client, auth_token, "a.pdf", b"%PDF", "application/pdf").json()["id"]

    assert client.delete(f"/api/files/{file_id}", headers=auth_token).status_code == 403
    assert client.delete(f"/api/files/{file_id}", headers=instructor_token).status_code == 200
    assert client.get(f"/api/files/{file_id}").status_code == 404
