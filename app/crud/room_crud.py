"""
Room CRUD.
"""
from typing import List, Optional
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import desc

from app.model.room import Room
from app.model.room_member import RoomMember
from app.crud.base import CRUDBase


class CRUDRoom(CRUDBase[Room, dict, dict]):
    def get_by_id(self, db: Session, *, room_id: uuid.UUID) -> Optional[Room]:
        return db.query(self.model).filter(self.model.id == room_id).first()

    def list_for_user(self, db: Session, *, user_id: uuid.UUID) -> List[Room]:
        """Rooms the user belongs to, most recently created first."""
        subq = db.query(RoomMember.room_id).filter(RoomMember.user_id == user_id)
        return (
            db.query(self.model)
            .filter(self.model.id.in_(subq))
            .order_by(desc(self.model.created_at), desc(self.model.id))
            .all()
        )


room_crud = CRUDRoom(Room)
