"""
File CRUD.
"""
from typing import List, Optional
import uuid
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc

from app.model.file import File
from app.model.file_version import FileVersion
from app.crud.base import CRUDBase


class CRUDFile(CRUDBase[File, dict, dict]):
    def get_in_room(self, db: Session, *, room_id: uuid.UUID, file_id: uuid.UUID) -> Optional[File]:
        """Get a file by id only if it belongs to the room."""
        return (
            db.query(self.model)
            .filter(self.model.id == file_id, self.model.room_id == room_id)
            .first()
        )

    def list_by_room(self, db: Session, *, room_id: uuid.UUID) -> List[File]:
        """Files in a room with versions (and uploaders) loaded, most recently updated first."""
        return (
            db.query(self.model)
            .options(selectinload(self.model.versions).joinedload(FileVersion.user))
            .filter(self.model.room_id == room_id)
            .order_by(desc(self.model.updated_at), desc(self.model.created_at))
            .all()
        )


file_crud = CRUDFile(File)
