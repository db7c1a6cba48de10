"""
Room member model. Its existence is the only gate for a room's channel,
messages and files.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base
from app.model.base import utcnow

ROLE_MEMBER = "member"
ROLE_OWNER = "owner"


class RoomMember(Base):
    __tablename__ = "room_members"
    __table_args__ = (UniqueConstraint("user_id", "room_id", name="uq_room_members_user_room"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    room_id = Column(Uuid(as_uuid=True), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False, default=ROLE_MEMBER)
    joined_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    room = relationship("Room", back_populates="members")
    user = relationship("User", backref="room_memberships")
