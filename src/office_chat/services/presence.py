"""Process-wide online presence, reference-counted per user."""
from __future__ import annotations

import logging

from office_chat.application.dto.events import (
    USER_OFFLINE,
    USER_ONLINE,
    PresenceEvent,
    event_data,
)
from office_chat.application.ports.push import PushChannel
from office_chat.domain.value_objects.ids import UserId

logger = logging.getLogger(__name__)


class PresenceTracker:
    """Tracks which users hold at least one live connection.

    A user with several tabs or devices holds several connections; only the
    first registration and the last unregistration are broadcast. Counts are
    updated before any await, so concurrent connects and disconnects of the
    same user cannot interleave inside a transition.
    """

    def __init__(self, push: PushChannel) -> None:
        self._push = push
        self._counts: dict[UserId, int] = {}

    async def register(self, user_id: int) -> frozenset[int]:
        """Count a new connection; return the online set including ``user_id``."""
        uid = UserId(user_id)
        count = self._counts.get(uid, 0) + 1
        self._counts[uid] = count
        online = self.snapshot()

        if count == 1:
            logger.info("User online: %s", user_id)
            await self._push.broadcast(USER_ONLINE, event_data(PresenceEvent(user_id)))
        else:
            logger.debug("User %s opened connection #%d", user_id, count)
        return online

    async def unregister(self, user_id: int) -> None:
        uid = UserId(user_id)
        count = self._counts.get(uid, 0)
        if count == 0:
            logger.warning("Unregister for user %s without live connections", user_id)
            return
        if count > 1:
            self._counts[uid] = count - 1
            logger.debug("User %s closed a connection, %d left", user_id, count - 1)
            return

        del self._counts[uid]
        logger.info("User offline: %s", user_id)
        await self._push.broadcast(USER_OFFLINE, event_data(PresenceEvent(user_id)))

    def snapshot(self) -> frozenset[int]:
        return frozenset(self._counts)

    def is_online(self, user_id: int) -> bool:
        return UserId(user_id) in self._counts

    def connection_count(self, user_id: int) -> int:
        return self._counts.get(UserId(user_id), 0)
