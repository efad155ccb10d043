from __future__ import annotations

from typing import Any, Protocol


class ConnectionHandle(Protocol):
    """A live duplex connection bound to one authenticated user."""

    id: str
    user_id: int


class PushChannel(Protocol):
    """Room-addressed delivery to connected clients."""

    def join(self, connection: ConnectionHandle, room: str) -> None: ...

    def leave(self, connection: ConnectionHandle, room: str) -> None: ...

    def user_ids_in_room(self, room: str) -> set[int]: ...

    async def send_to_room(
        self, room: str, event_type: str, data: dict[str, Any],
    ) -> int:
        """Deliver to every connection in the room. Returns delivery count."""
        ...

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> int: ...
