"""
Room and membership schemas.
"""
from datetime import datetime
from typing import List, Optional
import uuid
from pydantic import EmailStr, Field, model_validator

from app.model.room_member import ROLE_MEMBER, ROLE_OWNER
from app.schema.auth import UserInfo
from app.schema.base import CamelModel


class RoomCreateBody(CamelModel):
    """Body for POST /rooms."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)


class RoomResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class RoomListResponse(CamelModel):
    items: List[RoomResponse]
    total: int


class MemberAddBody(CamelModel):
    """Body for POST /rooms/{room_id}/members. Identify the user by id or email."""
    user_id: Optional[uuid.UUID] = None
    email: Optional[EmailStr] = None
    role: str = Field(ROLE_MEMBER, pattern=f"^({ROLE_MEMBER}|{ROLE_OWNER})$")

    @model_validator(mode="after")
    def _one_identifier(self):
        if not self.user_id and not self.email:
            raise ValueError("Provide userId or email.")
        return self


class MemberResponse(CamelModel):
    user_id: uuid.UUID
    room_id: uuid.UUID
    role: str
    joined_at: datetime
    user: Optional[UserInfo] = None


class MemberListResponse(CamelModel):
    items: List[MemberResponse]
