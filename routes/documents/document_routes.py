from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from sqlalchemy.orm import Session
from typing import List
from pathlib import Path
from datetime import datetime, timezone
import uuid
import logging
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from config import UPLOAD_DIR
from db import get_db
from models.auth.user_models import User
from models.documents.document_models import Document
from models.students.student_models import Student
from services.activity_feed import DOCUMENT_UPLOADED
from services.current_user import get_current_user, has_student_access
from services.file_validation import (
    ALLOWED_TYPE_GROUPS,
    FILE_TYPE_CLASSES,
    FileInfo,
    format_file_size,
    get_file_icon,
    get_file_type_category,
    get_file_validation_error,
    validate_multiple_files,
)
from services.ws_manager import manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


class DocumentOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    student_id: int
    uploaded_by: int
    file_name: str
    file_path: str
    mime_type: str
    file_size: int
    type: str
    created_at: datetime


def check_validation_options(allowed_types: str, file_type: str):
    if allowed_types not in ALLOWED_TYPE_GROUPS:
        raise HTTPException(status_code=400, detail=f"Invalid allowed_types. Use one of: {', '.join(ALLOWED_TYPE_GROUPS)}")
    if file_type not in FILE_TYPE_CLASSES:
        raise HTTPException(status_code=400, detail=f"Invalid file_type. Use one of: {', '.join(FILE_TYPE_CLASSES)}")


async def read_upload(upload: UploadFile):
    content = await upload.read()
    return content, FileInfo(filename=upload.filename or "file", content_type=upload.content_type, size=len(content))


# Validate files without storing them
@router.post("/validate", response_model=dict)
async def validate_files(
    files: List[UploadFile] = File(...),
    allowed_types: str = Form("all"),
    file_type: str = Form("default"),
):
    check_validation_options(allowed_types, file_type)
    infos = [(await read_upload(f))[1] for f in files]
    result = validate_multiple_files(infos, allowed_types, file_type)
    return {
        "isValid": result["is_valid"],
        "errors": result["errors"],
        "validFiles": [
            {
                "fileName": f.filename,
                "mimeType": f.content_type,
                "size": f.size,
                "sizeLabel": format_file_size(f.size),
                "category": get_file_type_category(f.content_type),
                "icon": get_file_icon(f.content_type),
            }
            for f in result["valid_files"]
        ],
    }


# Upload a single document for a student
@router.post("/upload/{student_id}", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
async def upload_document(
    student_id: int,
    file: UploadFile = File(...),
    allowed_types: str = Form("documents"),
    file_type: str = Form("document"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    check_validation_options(allowed_types, file_type)
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    if not has_student_access(current_user, student):
        raise HTTPException(status_code=403, detail="You do not have access to this student")

    content, info = await read_upload(file)
    error = get_file_validation_error(info, allowed_types, file_type)
    if error:
        raise HTTPException(status_code=400, detail=error)

    uploads_dir = Path(UPLOAD_DIR) / "documents" / str(student_id)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    stored_name = f"{uuid.uuid4().hex}{Path(info.filename).suffix.lower()}"
    file_path = uploads_dir / stored_name
    with open(file_path, "wb") as buffer:
        buffer.write(content)

    doc = Document(
        student_id=student_id,
        uploaded_by=current_user.id,
        file_name=info.filename,
        file_path=file_path.as_posix(),
        mime_type=info.content_type,
        file_size=info.size,
        type=file_type,
    )
    try:
        db.add(doc)
        db.commit()
    except Exception:
        db.rollback()
        # no row, no file
        file_path.unlink(missing_ok=True)
        raise
    db.refresh(doc)
    logger.info(f"Document {doc.id} uploaded for student {student_id} by user {current_user.id}")

    event = {
        "documentId": doc.id,
        "studentId": student_id,
        "fileName": doc.file_name,
        "fileSize": doc.file_size,
        "uploadedBy": current_user.id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    manager.publish(DOCUMENT_UPLOADED, event)
    return doc


@router.get("/student/{student_id}", response_model=List[DocumentOut])
def get_student_documents(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    if not has_student_access(current_user, student):
        raise HTTPException(status_code=403, detail="You do not have access to this student")
    return db.query(Document).filter(Document.student_id == student_id).order_by(Document.created_at.asc()).all()
