"""
File version model. One uploaded blob in a file's version chain.
(file_id, version_number) is unique so a label can never be assigned twice.
"""
from sqlalchemy import Column, String, Text, Integer, BigInteger, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base
from app.model.base import utcnow


class FileVersion(Base):
    __tablename__ = "file_versions"
    __table_args__ = (UniqueConstraint("file_id", "version_number", name="uq_file_versions_file_number"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    file_id = Column(Uuid(as_uuid=True), ForeignKey("files.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(String, nullable=False)  # "v1", "v2", ...
    version_number = Column(Integer, nullable=False)
    file_name = Column(String, nullable=False)  # stored filename
    original_name = Column(String, nullable=False)
    size = Column(BigInteger, nullable=False)
    mime_type = Column(String, nullable=False)
    storage_key = Column(String, nullable=True)
    comment = Column(Text, nullable=True)
    hash = Column(String(64), nullable=False, index=True)  # sha256 hex
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    file = relationship("File", back_populates="versions")
    user = relationship("User", backref="file_versions")
