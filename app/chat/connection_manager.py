"""
In-memory connection registry for the real-time channel: room subscriptions
and per-connection outbound queues.

Publishing enqueues the frame onto every subscriber's queue within one
event-loop turn, so all subscribers of a room see frames in publish order.
Each connection drains its own queue, so a slow or dead socket never delays
the others. Delivery is best effort and at most once per connection.
"""
import asyncio
import json
import logging
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, List, Optional, Set

logger = logging.getLogger(__name__)


class Connection:
    """One authenticated WebSocket plus its room bindings and outbound queue."""

    def __init__(self, websocket: Any, principal: Any, queue_size: int = 256) -> None:
        self.id = uuid.uuid4()
        self.websocket = websocket
        self.principal = principal
        self.rooms: Set[uuid.UUID] = set()
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._writer: Optional[asyncio.Task] = None
        self._registry: Optional["ConnectionRegistry"] = None

    def start(self, registry: "ConnectionRegistry") -> None:
        self._registry = registry
        self._writer = asyncio.get_running_loop().create_task(self._drain())

    def enqueue(self, text: str) -> bool:
        if self.closed:
            return False
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            logger.warning("Outbound queue full for connection %s, dropping frame", self.id)
            return False
        return True

    def send_event(self, event: str, payload: Any = None, room_id: Optional[uuid.UUID] = None) -> bool:
        return self.enqueue(encode_event(event, payload, room_id))

    async def flush(self) -> None:
        """Wait until every queued frame has been handed to the socket."""
        await self._queue.join()

    async def _drain(self) -> None:
        while True:
            text = await self._queue.get()
            try:
                await self.websocket.send_text(text)
            except Exception as e:
                logger.warning("Send failed for connection %s: %s", self.id, e)
                self._queue.task_done()
                self._fail()
                return
            self._queue.task_done()

    def _fail(self) -> None:
        self.closed = True
        if self._registry is not None:
            self._registry.detach(self)
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    async def close(self) -> None:
        self.closed = True
        if self._writer is not None and not self._writer.done():
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass


def _as_utc(stamp: datetime) -> datetime:
    # Naive timestamps (SQLite round trip) are UTC
    if stamp.tzinfo is None:
        return stamp.replace(tzinfo=timezone.utc)
    return stamp


def encode_event(event: str, payload: Any = None, room_id: Optional[uuid.UUID] = None) -> str:
    frame: Dict[str, Any] = {"event": event}
    if room_id is not None:
        frame["roomId"] = str(room_id)
    if payload is not None:
        frame["payload"] = payload
    return json.dumps(frame, default=str)


class ConnectionRegistry:
    """Tracks connections per room and fans out events to them."""

    def __init__(self, queue_size: int = 256, dedup_window: int = 4096) -> None:
        # room_id -> set of Connection
        self._rooms: Dict[uuid.UUID, Set[Connection]] = {}
        self._connections: Dict[uuid.UUID, Connection] = {}
        self._queue_size = queue_size
        self._dedup_window = dedup_window
        self._published: "OrderedDict[Hashable, datetime]" = OrderedDict()
        # Newest stamp evicted from the dedup window
        self._horizon: Optional[datetime] = None

    def open(self, websocket: Any, principal: Any) -> Connection:
        """Register a new connection and start its writer. Must run inside the event loop."""
        connection = Connection(websocket, principal, queue_size=self._queue_size)
        self._connections[connection.id] = connection
        connection.start(self)
        logger.debug("Opened connection %s", connection.id)
        return connection

    def bind(self, connection: Connection, room_id: uuid.UUID) -> None:
        if connection.closed:
            return
        self._rooms.setdefault(room_id, set()).add(connection)
        connection.rooms.add(room_id)
        logger.debug("Bound connection %s to room %s", connection.id, room_id)

    def unbind(self, connection: Connection, room_id: uuid.UUID) -> None:
        subscribers = self._rooms.get(room_id)
        if subscribers is not None:
            subscribers.discard(connection)
            if not subscribers:
                del self._rooms[room_id]
        connection.rooms.discard(room_id)
        logger.debug("Unbound connection %s from room %s", connection.id, room_id)

    def detach(self, connection: Connection) -> None:
        """Drop every binding of a connection without waiting on its writer."""
        for room_id in list(connection.rooms):
            self.unbind(connection, room_id)
        self._connections.pop(connection.id, None)

    async def disconnect(self, connection: Connection) -> None:
        self.detach(connection)
        await connection.close()
        logger.debug("Closed connection %s", connection.id)

    def subscribers(self, room_id: uuid.UUID) -> List[Connection]:
        return list(self._rooms.get(room_id) or ())

    def is_bound(self, connection: Connection, room_id: uuid.UUID) -> bool:
        return connection in (self._rooms.get(room_id) or ())

    def connection_count(self) -> int:
        return len(self._connections)

    def was_published(self, key: Hashable) -> bool:
        return key in self._published

    def covers(self, stamp: datetime) -> bool:
        """Whether a publish stamped `stamp` is still inside the dedup window."""
        return self._horizon is None or _as_utc(stamp) > self._horizon

    def _remember(self, key: Hashable, stamp: datetime) -> None:
        self._published[key] = stamp
        while len(self._published) > self._dedup_window:
            _, evicted = self._published.popitem(last=False)
            if self._horizon is None or evicted > self._horizon:
                self._horizon = evicted

    def publish(
        self,
        room_id: uuid.UUID,
        event: str,
        payload: Any,
        dedup_key: Optional[Hashable] = None,
        dedup_at: Optional[datetime] = None,
        exclude: Optional[Connection] = None,
    ) -> Optional[int]:
        """
        Enqueue an event for every subscriber of the room.

        With a dedup_key, an event already published under that key is ignored
        and None is returned. dedup_at is the time remembered for the key
        (default now), see covers(). Otherwise returns the number of
        connections the frame was queued for.
        """
        if dedup_key is not None:
            if self.was_published(dedup_key):
                logger.debug("Skipping duplicate publish %s", dedup_key)
                return None
            self._remember(dedup_key, _as_utc(dedup_at or datetime.now(timezone.utc)))
        text = encode_event(event, payload, room_id)
        delivered = 0
        for connection in self.subscribers(room_id):
            if connection is exclude:
                continue
            if connection.enqueue(text):
                delivered += 1
        return delivered
