"""
Message model. Immutable once created; ordered by created_at, then seq.
"""
from sqlalchemy import BigInteger, Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base
from app.model.base import utcnow


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        UniqueConstraint("id", name="uq_messages_id"),
    )

    # Insertion order; breaks created_at ties. Integer on SQLite so it aliases rowid.
    seq = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    id = Column(Uuid(as_uuid=True), nullable=False, default=uuid.uuid4)
    room_id = Column(Uuid(as_uuid=True), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)

    room = relationship("Room", back_populates="messages")
    user = relationship("User", backref="messages")
