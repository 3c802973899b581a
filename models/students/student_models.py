from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from db import Base


class Student(Base):
    __tablename__ = "Students"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    first_name = Column("firstName", String(100), nullable=False)
    last_name = Column("lastName", String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    counselor_id = Column("counselorId", Integer, ForeignKey("users.id"), nullable=True)
    marketing_owner_id = Column("marketingOwnerId", Integer, ForeignKey("users.id"), nullable=True)
    current_phase = Column("currentPhase", String(50), nullable=False, default="DOCUMENT_COLLECTION")
    created_at = Column("createdAt", DateTime, default=datetime.utcnow)
    updated_at = Column("updatedAt", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    counselor = relationship("User", foreign_keys=[counselor_id])
    marketing_owner = relationship("User", foreign_keys=[marketing_owner_id])
    messages = relationship("Message", back_populates="student")
    documents = relationship("Document", back_populates="student", cascade="all, delete-orphan")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Student(id={self.id}, name={self.full_name}, phase={self.current_phase})>"
