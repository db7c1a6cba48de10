"""
Room member CRUD.
"""
from typing import List, Optional
import uuid
from sqlalchemy.orm import Session, joinedload

from app.model.room_member import RoomMember
from app.crud.base import CRUDBase


class CRUDRoomMember(CRUDBase[RoomMember, dict, dict]):
    def get_by_room_and_user(
        self, db: Session, *, room_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[RoomMember]:
        return (
            db.query(self.model)
            .filter(
                self.model.room_id == room_id,
                self.model.user_id == user_id,
            )
            .first()
        )

    def list_by_room(self, db: Session, *, room_id: uuid.UUID) -> List[RoomMember]:
        return (
            db.query(self.model)
            .options(joinedload(self.model.user))
            .filter(self.model.room_id == room_id)
            .order_by(self.model.joined_at)
            .all()
        )

    def list_other_members(
        self, db: Session, *, room_id: uuid.UUID, exclude_user_id: uuid.UUID
    ) -> List[RoomMember]:
        return (
            db.query(self.model)
            .options(joinedload(self.model.user))
            .filter(
                self.model.room_id == room_id,
                self.model.user_id != exclude_user_id,
            )
            .all()
        )


room_member_crud = CRUDRoomMember(RoomMember)
