"""
Real-time channel. Clients authenticate with ?token= (or an Authorization
header), then send tagged JSON frames: join-room, leave-room, send-message.
Server frames are {"event", "roomId", "payload"}.
"""
import json
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from app.chat.connection_manager import Connection
from app.chat.gateway import ConnectionGateway
from app.core.database import SessionLocal
from app.core.exceptions import AppError, InvalidToken
from app.schema.ws import (
    ERROR,
    JOINED,
    LEFT,
    JoinRoomEvent,
    LeaveRoomEvent,
    SendMessageEvent,
    client_event_adapter,
)
from app.service.relay import MessageRelay
from app.session import extract_token

router = APIRouter()
logger = logging.getLogger(__name__)

CLOSE_INVALID_TOKEN = 4001


def _send_error(connection: Connection, code: str, message: str) -> None:
    connection.send_event(ERROR, {"code": code, "message": message})


def _handle_event(gateway: ConnectionGateway, connection: Connection, event) -> None:
    db = SessionLocal()
    try:
        if isinstance(event, JoinRoomEvent):
            gateway.bind_room(db, connection, event.room_id)
            connection.send_event(JOINED, room_id=event.room_id)
        elif isinstance(event, LeaveRoomEvent):
            gateway.unbind_room(connection, event.room_id)
            connection.send_event(LEFT, room_id=event.room_id)
        elif isinstance(event, SendMessageEvent):
            relay = MessageRelay(db, gateway.connections)
            user_id = connection.principal.user_id
            if event.message_id is not None:
                relay.relay_hint(event.room_id, user_id, event.message_id)
            else:
                relay.post(event.room_id, user_id, event.content or "")
    except AppError as e:
        _send_error(connection, e.code, e.message)
    finally:
        db.close()


@router.websocket("/ws")
async def websocket_channel(
    websocket: WebSocket,
    token: Optional[str] = None,
):
    gateway: ConnectionGateway = websocket.app.state.gateway
    await websocket.accept()
    try:
        principal = gateway.authenticate(token or extract_token(websocket.headers.get("authorization")))
    except InvalidToken:
        await websocket.close(code=CLOSE_INVALID_TOKEN)
        return

    connection = gateway.open(websocket, principal)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                event = client_event_adapter.validate_json(data)
            except ValidationError as e:
                logger.warning("Rejected frame from %s: %s", principal.user_id, e.errors()[:1])
                try:
                    json.loads(data)
                    _send_error(connection, "INVALID_EVENT", "Unknown event or invalid payload.")
                except json.JSONDecodeError:
                    _send_error(connection, "INVALID_JSON", "Frame must be valid JSON.")
                continue
            _handle_event(gateway, connection, event)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning("WebSocket closed: %s", e)
    finally:
        await gateway.disconnect(connection)
