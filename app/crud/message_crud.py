"""
Message CRUD.
"""
from typing import List, Optional
import uuid
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import asc, desc

from app.model.message import Message
from app.crud.base import CRUDBase


class CRUDMessage(CRUDBase[Message, dict, dict]):
    def get_by_id(self, db: Session, *, message_id: uuid.UUID) -> Optional[Message]:
        return (
            db.query(self.model)
            .options(joinedload(self.model.user))
            .filter(self.model.id == message_id)
            .first()
        )

    def list_by_room(self, db: Session, *, room_id: uuid.UUID, limit: Optional[int] = None) -> List[Message]:
        """Messages in a room, oldest first. With a limit, the newest `limit` messages (still oldest first)."""
        base = (
            db.query(self.model)
            .options(joinedload(self.model.user))
            .filter(self.model.room_id == room_id)
        )
        if limit is None:
            return base.order_by(asc(self.model.created_at), asc(self.model.seq)).all()
        items = base.order_by(desc(self.model.created_at), desc(self.model.seq)).limit(limit).all()
        items.reverse()
        return items


message_crud = CRUDMessage(Message)
