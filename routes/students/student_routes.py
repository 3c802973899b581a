from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import Optional
from pathlib import Path
from datetime import datetime, timezone
import logging
from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel
from config import UPLOAD_DIR
from db import get_db
from models.auth.user_models import User
from models.students.student_models import Student
from services.activity_feed import APPLICATION_STATUS_CHANGED, DASHBOARD_UPDATE
from services.current_user import get_current_user, has_student_access
from services.phases import PHASE_KEYS, build_timeline, get_phase, progress_percent
from services.progress_report import generate_progress_report_pdf
from services.ws_manager import manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["Students"])


# Pydantic Schemas
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class StudentCreate(CamelModel):
    first_name: str
    last_name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    counselor_id: Optional[int] = None
    marketing_owner_id: Optional[int] = None


class StudentOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    counselor_id: Optional[int] = None
    marketing_owner_id: Optional[int] = None
    current_phase: str
    created_at: datetime
    updated_at: datetime


class PhaseUpdate(CamelModel):
    phase: str


def get_student_for(db: Session, student_id: int, user: User) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    if not has_student_access(user, student):
        raise HTTPException(status_code=403, detail="You do not have access to this student")
    return student


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    for user_id in (payload.counselor_id, payload.marketing_owner_id):
        if user_id is not None and not db.query(User).filter(User.id == user_id).first():
            raise HTTPException(status_code=400, detail=f"User {user_id} does not exist")
    student = Student(**payload.model_dump())
    if student.counselor_id is None and student.marketing_owner_id is None:
        # the creator owns the lead when no owner is named
        student.marketing_owner_id = current_user.id
    db.add(student)
    db.commit()
    db.refresh(student)
    manager.publish(DASHBOARD_UPDATE, {"studentId": student.id, "reason": "student_created"})
    return student


@router.get("/{student_id}", response_model=StudentOut)
def get_student(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_student_for(db, student_id, current_user)


@router.get("/{student_id}/timeline", response_model=dict)
def get_timeline(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    student = get_student_for(db, student_id, current_user)
    return {
        "studentId": student.id,
        "currentPhase": student.current_phase,
        "progress": progress_percent(student.current_phase),
        "phases": build_timeline(student.current_phase),
    }


@router.patch("/{student_id}/phase", response_model=StudentOut)
def update_phase(
    student_id: int,
    payload: PhaseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    student = get_student_for(db, student_id, current_user)
    if payload.phase not in PHASE_KEYS:
        raise HTTPException(status_code=400, detail=f"Unknown phase: {payload.phase}")

    previous = student.current_phase
    student.current_phase = payload.phase
    db.commit()
    db.refresh(student)
    logger.info(f"Student {student.id} moved from {previous} to {student.current_phase} by user {current_user.id}")

    manager.publish(APPLICATION_STATUS_CHANGED, {
        "applicationId": student.id,
        "status": get_phase(student.current_phase)["label"],
        "changes": {"previousPhase": previous, "newPhase": student.current_phase},
        "updatedBy": current_user.id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })
    manager.publish(DASHBOARD_UPDATE, {"studentId": student.id, "reason": "phase_changed"})
    return student


@router.get("/{student_id}/progress-report")
def download_progress_report(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    student = get_student_for(db, student_id, current_user)
    pdf_dir = Path(UPLOAD_DIR) / "reports" / str(student.id)
    pdf_dir.mkdir(parents=True, exist_ok=True)
    pdf_path = pdf_dir / f"progress_report_{student.id}.pdf"
    generate_progress_report_pdf(
        str(pdf_path),
        student,
        build_timeline(student.current_phase),
        progress=progress_percent(student.current_phase),
    )
    return FileResponse(str(pdf_path), media_type="application/pdf", filename=pdf_path.name)
