"""
Message schemas.
"""
from datetime import datetime
from typing import List
import uuid
from pydantic import Field

from app.schema.auth import UserInfo
from app.schema.base import CamelModel


class MessageCreateBody(CamelModel):
    """Body for POST /messages. Whitespace-only content is rejected by the relay."""
    room_id: uuid.UUID
    content: str = Field(..., max_length=10_000)


class MessageResponse(CamelModel):
    """A persisted message with its author's profile. Also the new-message payload."""
    id: uuid.UUID
    room_id: uuid.UUID
    content: str
    created_at: datetime
    user: UserInfo


class MessageListResponse(CamelModel):
    items: List[MessageResponse]
