"""
Message relay: persist a message, then push it exactly once to every
connection subscribed to its room.

Persistence is the durability boundary. A client that misses a push (not
yet subscribed, disconnected, queue full) recovers through history(). A
message persisted between a client's history() read and its subscribe()
bind is only visible on the next history() call.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.chat.connection_manager import Connection, ConnectionRegistry
from app.core.config import settings
from app.core.exceptions import EmptyContent, NotAMember, NotFound, StorageError
from app.crud import message_crud
from app.model.message import Message
from app.schema.message import MessageResponse
from app.schema.ws import NEW_MESSAGE
from app.service.membership import MembershipService
from app.service.notification_service import NotificationService

logger = logging.getLogger(__name__)


def message_payload(msg: Message) -> Dict[str, Any]:
    """Serialize message (with author profile) for responses and the new-message push."""
    return MessageResponse.model_validate(msg).model_dump(mode="json", by_alias=True)


def _dedup_key(message_id: uuid.UUID):
    return (NEW_MESSAGE, message_id)


class MessageRelay:
    """Per-request relay bound to a DB session and the shared connection registry."""

    def __init__(self, db: Session, connections: ConnectionRegistry):
        self.db = db
        self.connections = connections
        self.membership = MembershipService(db)

    def post(self, room_id: uuid.UUID, user_id: uuid.UUID, content: str) -> Message:
        """
        Persist a message and relay it to the room.

        Raises:
            EmptyContent: content is empty after trimming
            NotAMember: author is not in the room
            StorageError: the message could not be persisted (nothing is relayed)
        """
        content = (content or "").strip()
        if not content:
            raise EmptyContent()
        self.membership.require_member(user_id, room_id)

        try:
            msg = message_crud.create_from_dict(
                self.db,
                obj_in={"room_id": room_id, "user_id": user_id, "content": content},
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to save message: %s", e)
            raise StorageError("Failed to save message. Please try again.")

        self._push(msg)
        NotificationService(self.db).notify_mentions(msg, author_name=msg.user.name)
        return msg

    def _push(self, msg: Message) -> Optional[int]:
        delivered = self.connections.publish(
            msg.room_id,
            NEW_MESSAGE,
            message_payload(msg),
            dedup_key=_dedup_key(msg.id),
            dedup_at=msg.created_at,
        )
        if delivered is not None:
            logger.debug("Relayed message %s to %d connection(s)", msg.id, delivered)
        return delivered

    def relay_hint(self, room_id: uuid.UUID, user_id: uuid.UUID, message_id: uuid.UUID) -> bool:
        """
        Handle a client's send-message hint for an already created message.
        Pushes it only if this relay has not pushed it yet. Messages older than
        what the dedup window still remembers are never pushed again. Returns
        True when pushed.
        """
        self.membership.require_member(user_id, room_id)
        msg = message_crud.get_by_id(self.db, message_id=message_id)
        if msg is None or msg.room_id != room_id:
            raise NotFound("Message")
        if not self.connections.covers(msg.created_at):
            logger.debug("Ignoring hint for message %s outside the dedup window", msg.id)
            return False
        return self._push(msg) is not None

    def subscribe(self, connection: Connection, room_id: uuid.UUID) -> None:
        """Bind a connection to the room's channel. Raises NotAMember."""
        user_id = connection.principal.user_id
        if not self.membership.is_member(user_id, room_id):
            raise NotAMember()
        self.connections.bind(connection, room_id)

    def history(self, room_id: uuid.UUID, limit: Optional[int] = None) -> List[Message]:
        """Messages in ascending created_at order; with a limit, the most recent ones."""
        if limit is not None:
            limit = max(1, min(limit, settings.HISTORY_LIMIT))
        return message_crud.list_by_room(self.db, room_id=room_id, limit=limit)
