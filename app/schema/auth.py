"""
Authentication schemas.
"""
from pydantic import EmailStr, Field
from datetime import datetime
import uuid

from app.schema.base import CamelModel


class UserRegister(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class UserInfo(CamelModel):
    id: uuid.UUID
    name: str
    email: str


class UserProfile(UserInfo):
    """Extended user info with timestamps."""
    is_active: bool
    created_at: datetime


class LoginResponse(CamelModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class MessageResponse(CamelModel):
    message: str
