
import enum
from sqlalchemy import (
    JSON, BigInteger, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import relationship
from docarchive.db.session import Base
from docarchive.models.user import utcnow


class FileType(str, enum.Enum):
    JPEG = "JPEG"
    PDF = "PDF"
    JSON = "JSON"


class UploadSource(str, enum.Enum):
    WEB_INTERFACE = "WEB_INTERFACE"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        CheckConstraint("file_size > 0", name="ck_documents_file_size_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    original_filename = Column(String(255), nullable=False)
    file_type = Column(Enum(FileType, name="file_type"), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    file_path = Column(Text, nullable=False)
    content_text = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON(none_as_null=True), nullable=True)
    upload_source = Column(Enum(UploadSource, name="upload_source"), nullable=False)
    external_service_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    owner = relationship("User", back_populates="documents")
