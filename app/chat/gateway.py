"""
Connection gateway: authenticates real-time connections and binds them to rooms.

States: unauthenticated -> authenticated -> zero or more rooms bound.
Disconnecting at any point releases every binding.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from app.chat.connection_manager import Connection, ConnectionRegistry
from app.core.exceptions import InvalidToken
from app.service.relay import MessageRelay
from app.session import get_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Authenticated user identity attached to a connection."""
    user_id: uuid.UUID
    email: str
    name: str

    @classmethod
    def from_session(cls, data: Dict[str, Any]) -> "Principal":
        return cls(
            user_id=uuid.UUID(data["user_id"]),
            email=data.get("email") or "",
            name=data.get("name") or "",
        )


class ConnectionGateway:
    """Owns the connection registry that the message relay publishes through."""

    def __init__(
        self,
        connections: ConnectionRegistry,
        session_lookup: Callable[[str], Optional[Dict[str, Any]]] = get_session,
    ) -> None:
        self.connections = connections
        self._session_lookup = session_lookup

    def authenticate(self, token: Optional[str]) -> Principal:
        """Resolve a bearer token to a principal. Raises InvalidToken."""
        if not token:
            raise InvalidToken()
        try:
            data = self._session_lookup(token)
        except Exception as e:
            logger.error(f"Session lookup failed: {e}")
            raise InvalidToken("Session store unavailable.")
        if not data or not data.get("user_id"):
            raise InvalidToken()
        try:
            return Principal.from_session(data)
        except (KeyError, ValueError):
            raise InvalidToken()

    def open(self, websocket: Any, principal: Principal) -> Connection:
        connection = self.connections.open(websocket, principal)
        logger.info(f"User {principal.user_id} connected ({connection.id})")
        return connection

    def bind_room(self, db: Session, connection: Connection, room_id: uuid.UUID) -> None:
        """Membership-gated subscribe. Raises NotAMember; the connection itself stays open."""
        MessageRelay(db, self.connections).subscribe(connection, room_id)
        logger.info(f"User {connection.principal.user_id} joined room {room_id}")

    def unbind_room(self, connection: Connection, room_id: uuid.UUID) -> None:
        self.connections.unbind(connection, room_id)
        logger.info(f"User {connection.principal.user_id} left room {room_id}")

    async def disconnect(self, connection: Connection) -> None:
        await self.connections.disconnect(connection)
        logger.info(f"User {connection.principal.user_id} disconnected ({connection.id})")
