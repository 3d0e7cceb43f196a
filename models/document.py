from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from database import Base
from models.enums import DocumentStatus
from utils.clock import utcnow


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(64), primary_key=True, index=True)
    owner_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    # Set once, when a submission claims the document
    application_id = Column(String(64), ForeignKey("loan_applications.id"), nullable=True, index=True)
    document_type = Column(String(128), nullable=False, index=True)
    file_name = Column(String(512), nullable=False)
    content_type = Column(String(128), nullable=False, default="application/octet-stream")
    file_size = Column(Integer, nullable=False)
    storage_handle = Column(String(512), nullable=False)
    status = Column(String(32), nullable=False, default=DocumentStatus.UPLOADED.value, index=True)
    reviewed_by = Column(String(64), ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
