"""Connection management helpers for notification websockets."""

from __future__ import annotations

import abc
import logging
from collections import defaultdict
from typing import Any, DefaultDict, Hashable, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionRegistry(abc.ABC):
    """Map live connection handles to the user they authenticated as.

    Every user owns a room holding zero or more handles. Implementations
    backed by shared storage can replace the in-process one when the API runs
    as several processes.
    """

    @abc.abstractmethod
    def bind(self, user_id: int, handle: Hashable) -> None:
        """Add ``handle`` to the room of ``user_id``."""

    @abc.abstractmethod
    def unbind(self, handle: Hashable) -> int | None:
        """Remove ``handle`` from its room and return the user it was bound to."""

    @abc.abstractmethod
    def connections_for(self, user_id: int) -> list[Any]:
        """Return a snapshot of the handles bound to ``user_id``."""


class NotificationConnectionManager(ConnectionRegistry):
    """Manage active websocket connections grouped by user."""

    def __init__(self) -> None:
        self._connections: DefaultDict[int, Set[WebSocket]] = defaultdict(set)
        self._owners: dict[WebSocket, int] = {}

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self.bind(user_id, websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool it was registered in."""

        self.unbind(websocket)

    def bind(self, user_id: int, handle: WebSocket) -> None:
        previous = self._owners.get(handle)
        if previous is not None and previous != user_id:
            self.unbind(handle)
        self._connections[user_id].add(handle)
        self._owners[handle] = user_id
        logger.debug(
            "Bound connection for user %s (%d open)", user_id, len(self._connections[user_id])
        )

    def unbind(self, handle: WebSocket) -> int | None:
        user_id = self._owners.pop(handle, None)
        if user_id is None:
            return None
        connections = self._connections.get(user_id)
        if connections is not None:
            connections.discard(handle)
            if not connections:
                self._connections.pop(user_id, None)
        logger.debug("Unbound connection for user %s", user_id)
        return user_id

    def connections_for(self, user_id: int) -> list[WebSocket]:
        return list(self._connections.get(user_id, ()))

    def connected_users(self) -> set[int]:
        return set(self._connections)


notification_manager = NotificationConnectionManager()


__all__ = ["ConnectionRegistry", "NotificationConnectionManager", "notification_manager"]
