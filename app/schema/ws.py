"""
WebSocket event schemas. Client frames are tagged by "event"; anything that
does not validate is rejected before it reaches the services.
"""
from typing import Annotated, Literal, Optional, Union
import uuid
from pydantic import Field, TypeAdapter

from app.schema.base import CamelModel

JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
SEND_MESSAGE = "send-message"

NEW_MESSAGE = "new-message"
FILE_NOTIFICATION = "file-notification"
JOINED = "joined"
LEFT = "left"
ERROR = "error"


class JoinRoomEvent(CamelModel):
    event: Literal["join-room"]
    room_id: uuid.UUID


class LeaveRoomEvent(CamelModel):
    event: Literal["leave-room"]
    room_id: uuid.UUID


class SendMessageEvent(CamelModel):
    """Broadcast hint after a REST create (message_id), or a direct post (content only)."""
    event: Literal["send-message"]
    room_id: uuid.UUID
    content: Optional[str] = Field(None, max_length=10_000)
    message_id: Optional[uuid.UUID] = None


ClientEvent = Annotated[
    Union[JoinRoomEvent, LeaveRoomEvent, SendMessageEvent],
    Field(discriminator="event"),
]

client_event_adapter = TypeAdapter(ClientEvent)


class FileNotificationPayload(CamelModel):
    file_id: uuid.UUID
    file_name: str
    version: str
    user_id: uuid.UUID
    room_id: uuid.UUID
