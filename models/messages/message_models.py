from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from db import Base
import enum


class MessageType(enum.Enum):
    text = "text"
    system = "system"
    notification = "notification"


class Message(Base):
    """Counselor / marketing thread entry about a single student.

    Written once on send and updated once when the receiver reads it.
    """
    __tablename__ = "Messages"
    __table_args__ = (
        Index("messages_student_id", "studentId"),
        Index("messages_sender_id", "senderId"),
        Index("messages_receiver_id", "receiverId"),
        Index("messages_student_id_sender_id_receiver_id", "studentId", "senderId", "receiverId"),
        Index("messages_is_read", "isRead"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column("studentId", Integer, ForeignKey("Students.id"), nullable=False)
    # user who sent the message (marketing/B2B marketing or counselor)
    sender_id = Column("senderId", Integer, ForeignKey("users.id"), nullable=False)
    # user who should receive the message (counselor or marketing/B2B marketing)
    receiver_id = Column("receiverId", Integer, ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column("isRead", Boolean, nullable=False, default=False)
    read_at = Column("readAt", DateTime, nullable=True)
    message_type = Column("messageType", Enum(MessageType), nullable=False, default=MessageType.text)
    created_at = Column("createdAt", DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column("updatedAt", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="messages")
    sender = relationship("User", foreign_keys=[sender_id], back_populates="sent_messages")
    receiver = relationship("User", foreign_keys=[receiver_id], back_populates="received_messages")

    def mark_read(self, when: datetime = None):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = when or datetime.utcnow()

    def __repr__(self):
        return f"<Message(id={self.id}, student_id={self.student_id}, sender_id={self.sender_id}, receiver_id={self.receiver_id})>"
