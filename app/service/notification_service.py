"""
Notification sink for the message and file flows.
Failures here are logged and never undo the message or version that triggered them.
"""
import logging
import re
import uuid
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound
from app.crud import notification_crud, room_member_crud
from app.model.file import File
from app.model.file_version import FileVersion
from app.model.message import Message
from app.model.notification import Notification
from app.model.room_member import RoomMember

logger = logging.getLogger(__name__)

TYPE_MENTION = "mention"
TYPE_FILE_UPLOAD = "file-upload"


def _mentions(content: str, member: RoomMember) -> bool:
    user = member.user
    if user is None:
        return False
    handles = [user.name, user.email.split("@", 1)[0]]
    for handle in handles:
        if handle and re.search(rf"@{re.escape(handle)}(?!\w)", content, re.IGNORECASE):
            return True
    return False


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def notify_mentions(self, message: Message, author_name: str) -> List[Notification]:
        """One "mention" notification per other member named as @name or @email-local-part."""
        if "@" not in message.content:
            return []
        others = room_member_crud.list_other_members(
            self.db, room_id=message.room_id, exclude_user_id=message.user_id
        )
        targets = [m.user_id for m in others if _mentions(message.content, m)]
        return self._write(
            targets,
            type=TYPE_MENTION,
            title=f"{author_name} mentioned you",
            content=message.content[:200],
        )

    def notify_file_upload(self, file: File, version: FileVersion, uploader_name: str) -> List[Notification]:
        others = room_member_crud.list_other_members(
            self.db, room_id=file.room_id, exclude_user_id=version.user_id
        )
        title = f"{uploader_name} uploaded {file.original_name} ({version.version})"
        return self._write(
            [m.user_id for m in others],
            type=TYPE_FILE_UPLOAD,
            title=title,
            content=version.comment,
        )

    def _write(self, user_ids: List[uuid.UUID], **fields) -> List[Notification]:
        if not user_ids:
            return []
        try:
            created = [
                notification_crud.create_from_dict(
                    self.db, obj_in={"user_id": uid, **fields}, commit=False
                )
                for uid in user_ids
            ]
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Failed to write %s notifications: %s", fields.get("type"), e)
            return []
        return created

    def list_for_user(self, user_id: uuid.UUID, unread_only: bool = False) -> List[Notification]:
        return notification_crud.list_by_user(self.db, user_id=user_id, unread_only=unread_only)

    def mark_read(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> Notification:
        notification = notification_crud.get_for_user(
            self.db, user_id=user_id, notification_id=notification_id
        )
        if notification is None:
            raise NotFound("Notification")
        return notification_crud.update(self.db, db_obj=notification, obj_in={"is_read": True})
