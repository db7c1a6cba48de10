"""
Messages API: history and create. Creating relays the message to the room's
WebSocket subscribers after it is persisted.
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.chat.gateway import ConnectionGateway
from app.core.database import get_db
from app.core.dependencies import current_user_id, get_gateway
from app.schema.message import MessageCreateBody, MessageListResponse, MessageResponse
from app.service.membership import MembershipService
from app.service.relay import MessageRelay

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=MessageListResponse)
async def list_messages(
    room_id: uuid.UUID = Query(..., alias="roomId"),
    limit: Optional[int] = Query(None, ge=1),
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
    gateway: ConnectionGateway = Depends(get_gateway),
):
    """Room history, oldest first."""
    MembershipService(db).require_member(user_id, room_id)
    items = MessageRelay(db, gateway.connections).history(room_id, limit=limit)
    return MessageListResponse(items=[MessageResponse.model_validate(m) for m in items])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_message(
    body: MessageCreateBody,
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
    gateway: ConnectionGateway = Depends(get_gateway),
):
    """Persist then relay a message."""
    msg = MessageRelay(db, gateway.connections).post(body.room_id, user_id, body.content)
    return MessageResponse.model_validate(msg)
