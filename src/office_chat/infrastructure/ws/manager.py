"""In-process WebSocket connection and room registry."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import WebSocket

from office_chat.domain.value_objects.rooms import personal_room
from office_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class Connection:
    """One live WebSocket bound to the user resolved at connect time."""

    __slots__ = ("id", "user_id", "websocket", "rooms")

    def __init__(self, websocket: WebSocket, user_id: int) -> None:
        self.id = uuid.uuid4().hex
        self.user_id = user_id
        self.websocket = websocket
        self.rooms: set[str] = set()

    def __repr__(self) -> str:
        return f"<Connection {self.id[:8]} user={self.user_id}>"


class ConnectionManager:
    """Tracks live connections and the rooms each one has joined.

    Implements application.ports.push.PushChannel. State is confined to this
    process; every mutation happens between await points so no locking is
    needed.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._rooms: dict[str, set[str]] = {}

    async def connect(self, ws: WebSocket, user_id: int) -> Connection:
        await ws.accept()
        conn = Connection(ws, user_id)
        self._connections[conn.id] = conn
        self.join(conn, personal_room(user_id))
        logger.debug("WS connected: %r (total=%d)", conn, len(self._connections))
        return conn

    def disconnect(self, conn: Connection) -> None:
        """Drop a connection from the registry and all rooms. Idempotent."""
        if self._connections.pop(conn.id, None) is None:
            return
        for room in list(conn.rooms):
            self.leave(conn, room)
        logger.debug("WS disconnected: %r", conn)

    def join(self, conn: Connection, room: str) -> None:
        self._rooms.setdefault(room, set()).add(conn.id)
        conn.rooms.add(room)

    def leave(self, conn: Connection, room: str) -> None:
        members = self._rooms.get(room)
        if members is not None:
            members.discard(conn.id)
            if not members:
                del self._rooms[room]
        conn.rooms.discard(room)

    def connections_in_room(self, room: str) -> list[Connection]:
        return [
            self._connections[cid]
            for cid in self._rooms.get(room, set())
            if cid in self._connections
        ]

    def user_ids_in_room(self, room: str) -> set[int]:
        return {conn.user_id for conn in self.connections_in_room(room)}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def send_to_room(
        self,
        room: str,
        event_type: str,
        data: dict[str, Any],
    ) -> int:
        """Send a WS message to every connection joined to a room."""
        return await self._deliver(self.connections_in_room(room), event_type, data)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> int:
        """Send a WS message to every live connection."""
        return await self._deliver(list(self._connections.values()), event_type, data)

    async def send(self, conn: Connection, event_type: str, data: dict[str, Any]) -> bool:
        """Send a WS message to a single connection."""
        return await self._deliver([conn], event_type, data) == 1

    async def _deliver(
        self,
        conns: list[Connection],
        event_type: str,
        data: dict[str, Any],
    ) -> int:
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        delivered = 0
        dead: list[Connection] = []
        for conn in conns:
            try:
                await conn.websocket.send_text(raw)
                delivered += 1
            except Exception:
                logger.debug("WS send failed for %r", conn, exc_info=True)
                dead.append(conn)
        for conn in dead:
            self.disconnect(conn)
        return delivered
