from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from config import UPLOAD_DIR


def test_validate_reports_valid_and_invalid_files(client):
    response = client.post(
        "/api/documents/validate",
        files=[
            ("files", ("cv.pdf", b"%PDF-1.4 small", "application/pdf")),
            ("files", ("big.pdf", b"0" * (3 * 1024 * 1024), "application/pdf")),
            ("files", ("notes.txt", b"hello", "text/plain")),
        ],
        data={"allowed_types": "documents", "file_type": "document"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["isValid"] is False
    assert [f["fileName"] for f in data["validFiles"]] == ["cv.pdf"]
    assert data["validFiles"][0]["category"] == "document"
    assert data["errors"] == [
        {"file": "big.pdf", "index": 1, "error": "File size too large. Current: 3.00 MB, Maximum: 2.00 MB"},
        {"file": "notes.txt", "index": 2, "error": "Invalid file type. Allowed types: PDF, Word, Excel"},
    ]


def test_validate_rejects_unknown_options(client):
    response = client.post(
        "/api/documents/validate",
        files=[("files", ("cv.pdf", b"%PDF", "application/pdf"))],
        data={"allowed_types": "videos"},
    )
    assert response.status_code == 400


def test_upload_document_feeds_activity(client, users, student, headers_for):
    headers = headers_for(users["counselor"])
    client.get("/api/activity/feed", headers=headers)
    response = client.post(
        f"/api/documents/upload/{student.id}",
        files={"file": ("passport.pdf", b"%PDF-1.4 passport", "application/pdf")},
        headers=headers,
    )
    assert response.status_code == 201
    doc = response.json()
    assert doc["fileName"] == "passport.pdf"
    assert doc["studentId"] == student.id
    assert doc["uploadedBy"] == users["counselor"].id
    assert doc["type"] == "document"

    listed = client.get(f"/api/documents/student/{student.id}", headers=headers).json()
    assert [d["id"] for d in listed] == [doc["id"]]

    feed = client.get("/api/activity/feed", headers=headers).json()
    assert feed["activities"][0]["description"] == "Document uploaded: passport.pdf"


def test_upload_rejects_invalid_file(client, users, student, headers_for):
    response = client.post(
        f"/api/documents/upload/{student.id}",
        files={"file": ("script.sh", b"echo hi", "text/x-shellscript")},
        headers=headers_for(users["counselor"]),
    )
    assert response.status_code == 400


def test_upload_requires_access(client, users, student, headers_for):
    response = client.post(
        f"/api/documents/upload/{student.id}",
        files={"file": ("passport.pdf", b"%PDF", "application/pdf")},
        headers=headers_for(users["outsider"]),
    )
    assert response.status_code == 403


def test_failed_commit_removes_stored_file(client, users, student, headers_for, monkeypatch):
    uploads_dir = Path(UPLOAD_DIR) / "documents" / str(student.id)
    before = set(uploads_dir.iterdir()) if uploads_dir.exists() else set()

    def failing_commit(self):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(Session, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        client.post(
            f"/api/documents/upload/{student.id}",
            files={"file": ("passport.pdf", b"%PDF-1.4 passport", "application/pdf")},
            headers=headers_for(users["counselor"]),
        )
    monkeypatch.undo()

    assert set(uploads_dir.iterdir()) == before
    listed = client.get(f"/api/documents/student/{student.id}", headers=headers_for(users["counselor"])).json()
    assert listed == []
