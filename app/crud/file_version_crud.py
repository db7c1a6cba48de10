"""
File version CRUD.
"""
from typing import List, Optional
import uuid
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import asc

from app.model.file_version import FileVersion
from app.crud.base import CRUDBase


class CRUDFileVersion(CRUDBase[FileVersion, dict, dict]):
    def get_by_id(self, db: Session, *, version_id: uuid.UUID) -> Optional[FileVersion]:
        return (
            db.query(self.model)
            .options(joinedload(self.model.file), joinedload(self.model.user))
            .filter(self.model.id == version_id)
            .first()
        )

    def count_by_file(self, db: Session, *, file_id: uuid.UUID) -> int:
        return db.query(self.model).filter(self.model.file_id == file_id).count()

    def list_by_file(self, db: Session, *, file_id: uuid.UUID) -> List[FileVersion]:
        """Version chain ascending by version number."""
        return (
            db.query(self.model)
            .options(joinedload(self.model.user))
            .filter(self.model.file_id == file_id)
            .order_by(asc(self.model.version_number))
            .all()
        )


file_version_crud = CRUDFileVersion(FileVersion)
