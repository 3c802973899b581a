from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from db import Base


class Document(Base):
    __tablename__ = "Documents"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    student_id = Column("studentId", Integer, ForeignKey("Students.id"), nullable=False, index=True)
    uploaded_by = Column("uploadedBy", Integer, ForeignKey("users.id"), nullable=False)
    file_name = Column("fileName", String(255), nullable=False)
    file_path = Column("filePath", String(500), nullable=False)
    mime_type = Column("mimeType", String(150), nullable=False)
    file_size = Column("fileSize", Integer, nullable=False)
    type = Column(String(20), nullable=False, default="document")  # file-type class
    created_at = Column("createdAt", DateTime, default=datetime.utcnow)

    student = relationship("Student", back_populates="documents")

    def __repr__(self):
        return f"<Document(id={self.id}, student_id={self.student_id}, file_name={self.file_name})>"
