"""
Notification CRUD.
"""
from typing import List, Optional
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import desc

from app.model.notification import Notification
from app.crud.base import CRUDBase


class CRUDNotification(CRUDBase[Notification, dict, dict]):
    def get_for_user(
        self, db: Session, *, user_id: uuid.UUID, notification_id: uuid.UUID
    ) -> Optional[Notification]:
        return (
            db.query(self.model)
            .filter(self.model.id == notification_id, self.model.user_id == user_id)
            .first()
        )

    def list_by_user(
        self, db: Session, *, user_id: uuid.UUID, unread_only: bool = False, limit: int = 50
    ) -> List[Notification]:
        base = db.query(self.model).filter(self.model.user_id == user_id)
        if unread_only:
            base = base.filter(self.model.is_read.is_(False))
        return base.order_by(desc(self.model.created_at)).limit(limit).all()


notification_crud = CRUDNotification(Notification)
