from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime
import logging
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from db import get_db
from models.auth.user_models import User, UserRole
from models.students.student_models import Student
from models.messages.message_models import Message, MessageType
from services.current_user import get_current_user, has_student_access
from services.ws_manager import manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["Messages"])


# Schemas
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageCreate(CamelModel):
    student_id: int
    receiver_id: int
    message: str


class UserSummary(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole


class StudentSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None


class MessageOut(CamelModel):
    id: int
    student_id: int
    sender_id: int
    receiver_id: int
    message: str
    is_read: bool
    read_at: Optional[datetime] = None
    message_type: MessageType
    created_at: datetime
    sender: Optional[UserSummary] = None
    receiver: Optional[UserSummary] = None
    student: Optional[StudentSummary] = None


class UnreadCount(CamelModel):
    unread_count: int


# Helper: fetch a student the caller is allowed to see
def get_accessible_student(db: Session, student_id: int, user: User) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    if not has_student_access(user, student):
        raise HTTPException(status_code=403, detail="You do not have access to this student")
    return student


# Helper: pick the receiver from the student's counselor / marketing owner
def resolve_receiver_id(student: Student, sender: User, requested_receiver_id: int) -> int:
    if student.marketing_owner_id == sender.id:
        if not student.counselor_id:
            raise HTTPException(status_code=400, detail="Cannot send message: No counselor assigned to this student yet.")
        return student.counselor_id
    if student.counselor_id == sender.id:
        if not student.marketing_owner_id:
            raise HTTPException(status_code=400, detail="Cannot send message: No marketing contact found for this student.")
        return student.marketing_owner_id
    # admin or any other role must address the counselor or the marketing owner
    if requested_receiver_id not in (student.counselor_id, student.marketing_owner_id):
        raise HTTPException(status_code=403, detail="Invalid receiver for this student")
    return requested_receiver_id


def mark_thread_read(db: Session, student_id: int, receiver_id: int) -> int:
    now = datetime.utcnow()
    updated = (
        db.query(Message)
        .filter(Message.student_id == student_id, Message.receiver_id == receiver_id, Message.is_read.is_(False))
        .update({Message.is_read: True, Message.read_at: now}, synchronize_session=False)
    )
    db.commit()
    return updated


# Send a message from marketing to counselor or vice versa
@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    text = (payload.message or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Student ID, receiver ID, and message are required")

    student = get_accessible_student(db, payload.student_id, current_user)

    receiver = db.query(User).filter(User.id == payload.receiver_id).first()
    if not receiver:
        raise HTTPException(status_code=404, detail="Receiver not found")

    receiver_id = resolve_receiver_id(student, current_user, payload.receiver_id)
    if receiver_id == current_user.id:
        raise HTTPException(status_code=400, detail="Sender and receiver must be different users")

    msg = Message(
        student_id=student.id,
        sender_id=current_user.id,
        receiver_id=receiver_id,
        message=text,
        message_type=MessageType.text,
    )
    db.add(msg)
    db.commit()
    db.refresh(msg)
    logger.info(f"Message {msg.id} sent by user {current_user.id} to user {receiver_id} for student {student.id}")

    out = MessageOut.model_validate(msg)
    if not manager.is_user_connected(receiver_id):
        logger.debug(f"User {receiver_id} is offline; message {msg.id} waits for the next fetch")
    manager.publish(
        "new_message",
        {"message": out.model_dump(mode="json", by_alias=True), "studentId": student.id, "senderId": current_user.id},
        room=f"user_{receiver_id}",
    )
    return out


# Get the thread for a student; received messages are marked read
@router.get("/student/{student_id}", response_model=List[MessageOut])
def get_student_messages(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_accessible_student(db, student_id, current_user)
    msgs = (
        db.query(Message)
        .filter(
            Message.student_id == student_id,
            or_(Message.sender_id == current_user.id, Message.receiver_id == current_user.id),
        )
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )
    # snapshot before the read update so the caller sees what was unread
    result = [MessageOut.model_validate(m) for m in msgs]
    mark_thread_read(db, student_id, current_user.id)
    return result


# Latest message per lead owned by the caller
@router.get("/recent", response_model=List[MessageOut])
def get_recent_messages(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    student_ids = [s.id for s in db.query(Student.id).filter(Student.marketing_owner_id == current_user.id).all()]
    if not student_ids:
        return []

    msgs = (
        db.query(Message)
        .filter(
            Message.student_id.in_(student_ids),
            or_(Message.sender_id == current_user.id, Message.receiver_id == current_user.id),
        )
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )
    latest = {}
    for m in msgs:
        if m.student_id not in latest:
            latest[m.student_id] = m
    return [MessageOut.model_validate(m) for m in latest.values()]


@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    count = (
        db.query(Message)
        .filter(Message.receiver_id == current_user.id, Message.is_read.is_(False))
        .count()
    )
    return UnreadCount(unread_count=count)


@router.patch("/student/{student_id}/read", response_model=dict)
def mark_as_read(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = mark_thread_read(db, student_id, current_user.id)
    return {"detail": "Messages marked as read", "updated": updated}
