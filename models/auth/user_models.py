from sqlalchemy import Column, String, Integer, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from db import Base
import enum


class UserRole(enum.Enum):
    admin = "admin"
    counselor = "counselor"
    telecaller = "telecaller"
    marketing = "marketing"
    b2b_marketing = "b2b_marketing"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(Enum(UserRole), nullable=False)
    active = Column(Boolean, default=True)
    avatar = Column(String(500), nullable=True)  # File path to avatar image
    last_login = Column("lastLogin", DateTime, nullable=True)
    created_at = Column("createdAt", DateTime, default=datetime.utcnow)
    updated_at = Column("updatedAt", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sent_messages = relationship("Message", foreign_keys="Message.sender_id", back_populates="sender")
    received_messages = relationship("Message", foreign_keys="Message.receiver_id", back_populates="receiver")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
