"""
Rooms API: list/create rooms, list/add members.
"""
import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import current_user_id
from app.schema.room import (
    MemberAddBody,
    MemberListResponse,
    MemberResponse,
    RoomCreateBody,
    RoomListResponse,
    RoomResponse,
)
from app.service.membership import MembershipService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=RoomListResponse)
async def list_rooms(
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """Rooms the current user belongs to, newest first."""
    rooms = MembershipService(db).list_rooms(user_id)
    return RoomListResponse(
        items=[RoomResponse.model_validate(r) for r in rooms],
        total=len(rooms),
    )


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    body: RoomCreateBody,
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """Create a room; the creator becomes its owner."""
    room = MembershipService(db).create_room(user_id, body.name, body.description)
    return RoomResponse.model_validate(room)


@router.get("/{room_id}/members", response_model=MemberListResponse)
async def list_members(
    room_id: uuid.UUID,
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    membership = MembershipService(db)
    membership.require_member(user_id, room_id)
    return MemberListResponse(
        items=[MemberResponse.model_validate(m) for m in membership.list_members(room_id)]
    )


@router.post("/{room_id}/members", response_model=MemberResponse)
async def add_member(
    room_id: uuid.UUID,
    body: MemberAddBody,
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """Owner adds a user by id or email. Adding an existing member is a no-op."""
    member = MembershipService(db).add_member(
        user_id,
        room_id,
        user_id=body.user_id,
        email=body.email,
        role=body.role,
    )
    return MemberResponse.model_validate(member)
