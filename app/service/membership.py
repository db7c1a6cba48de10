"""
Room membership registry. A RoomMember row is the only gate for joining a
room's channel and for posting messages or files into it.
"""
import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import AlreadyMember, NotAMember, NotFound, StorageError
from app.crud import room_crud, room_member_crud, user_crud
from app.model.room import Room
from app.model.room_member import ROLE_MEMBER, ROLE_OWNER, RoomMember

logger = logging.getLogger(__name__)


class MembershipService:
    """Membership checks and room/member creation."""

    def __init__(self, db: Session):
        self.db = db

    def is_member(self, user_id: uuid.UUID, room_id: uuid.UUID) -> bool:
        return room_member_crud.get_by_room_and_user(self.db, room_id=room_id, user_id=user_id) is not None

    def require_member(self, user_id: uuid.UUID, room_id: uuid.UUID) -> RoomMember:
        member = room_member_crud.get_by_room_and_user(self.db, room_id=room_id, user_id=user_id)
        if member is None:
            raise NotAMember()
        return member

    def join(self, user_id: uuid.UUID, room_id: uuid.UUID, role: str = ROLE_MEMBER) -> RoomMember:
        """
        Add user to room.

        Raises:
            AlreadyMember: the (user, room) pair exists; callers treat this as success
            NotFound: room or user does not exist
            StorageError: the write failed
        """
        if self.is_member(user_id, room_id):
            raise AlreadyMember()
        if room_crud.get_by_id(self.db, room_id=room_id) is None:
            raise NotFound("Room")
        if user_crud.get(self.db, user_id) is None:
            raise NotFound("User")
        try:
            member = room_member_crud.create_from_dict(
                self.db,
                obj_in={"user_id": user_id, "room_id": room_id, "role": role},
            )
        except IntegrityError:
            # Lost a race against a concurrent join of the same pair
            self.db.rollback()
            raise AlreadyMember()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to add member: %s", e)
            raise StorageError("Failed to add member. Please try again.")
        logger.info(f"User {user_id} joined room {room_id} as {role}")
        return member

    def ensure_member(self, user_id: uuid.UUID, room_id: uuid.UUID, role: str = ROLE_MEMBER) -> RoomMember:
        """join() that treats AlreadyMember as success and returns the existing row."""
        try:
            return self.join(user_id, room_id, role=role)
        except AlreadyMember:
            return self.require_member(user_id, room_id)

    def list_rooms(self, user_id: uuid.UUID) -> List[Room]:
        return room_crud.list_for_user(self.db, user_id=user_id)

    def list_members(self, room_id: uuid.UUID) -> List[RoomMember]:
        return room_member_crud.list_by_room(self.db, room_id=room_id)

    def create_room(self, owner_id: uuid.UUID, name: str, description: Optional[str] = None) -> Room:
        """Create a room with its creator as owner, in one transaction."""
        name = name.strip()
        try:
            room = room_crud.create_from_dict(
                self.db,
                obj_in={"name": name, "description": description},
                commit=False,
            )
            room_member_crud.create_from_dict(
                self.db,
                obj_in={"user_id": owner_id, "room_id": room.id, "role": ROLE_OWNER},
                commit=False,
            )
            self.db.commit()
            self.db.refresh(room)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to create room: %s", e)
            raise StorageError("Failed to create room. Please try again.")
        logger.info(f"Room created: {room.id} ({room.name}) by {owner_id}")
        return room

    def add_member(
        self,
        actor_id: uuid.UUID,
        room_id: uuid.UUID,
        *,
        user_id: Optional[uuid.UUID] = None,
        email: Optional[str] = None,
        role: str = ROLE_MEMBER,
    ) -> RoomMember:
        """Owner adds another user. Adding an existing member returns the existing row."""
        actor = self.require_member(actor_id, room_id)
        if actor.role != ROLE_OWNER:
            raise NotAMember("Only room owners can add members.")
        if user_id is None:
            user = user_crud.get_by_email(self.db, email) if email else None
            if user is None:
                raise NotFound("User")
            user_id = user.id
        return self.ensure_member(user_id, room_id, role=role)
