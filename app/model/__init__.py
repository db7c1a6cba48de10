from app.model.user import User
from app.model.room import Room
from app.model.room_member import RoomMember
from app.model.message import Message
from app.model.file import File
from app.model.file_version import FileVersion
from app.model.notification import Notification

__all__ = ["User", "Room", "RoomMember", "Message", "File", "FileVersion", "Notification"]
