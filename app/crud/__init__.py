from app.crud.user_crud import user_crud
from app.crud.room_crud import room_crud
from app.crud.room_member_crud import room_member_crud
from app.crud.message_crud import message_crud
from app.crud.file_crud import file_crud
from app.crud.file_version_crud import file_version_crud
from app.crud.notification_crud import notification_crud

__all__ = [
    "user_crud",
    "room_crud",
    "room_member_crud",
    "message_crud",
    "file_crud",
    "file_version_crud",
    "notification_crud",
]
