"""
Notification schemas.
"""
from datetime import datetime
from typing import List, Optional
import uuid

from app.schema.base import CamelModel


class NotificationResponse(CamelModel):
    id: uuid.UUID
    type: str
    title: str
    content: Optional[str] = None
    is_read: bool
    created_at: datetime


class NotificationListResponse(CamelModel):
    items: List[NotificationResponse]
