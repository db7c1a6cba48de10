"""
Notifications API.
"""
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import current_user_id
from app.schema.notification import NotificationListResponse, NotificationResponse
from app.service.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = False,
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    items = NotificationService(db).list_for_user(user_id, unread_only=unread_only)
    return NotificationListResponse(items=[NotificationResponse.model_validate(n) for n in items])


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: uuid.UUID,
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    notification = NotificationService(db).mark_read(user_id, notification_id)
    return NotificationResponse.model_validate(notification)
