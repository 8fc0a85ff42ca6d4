"""
In-memory presence registry.

A user is online while at least one of their connections is open. The maps
are only touched under the registry lock, so it is safe to share one
instance across request threads.
"""

import logging
import threading
from typing import Dict, List, Optional, Set

logger = logging.getLogger(__name__)


class UserPresenceService:

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._connections_by_user: Dict[int, Set[str]] = {}
        self._user_by_connection: Dict[str, int] = {}

    def user_connected(self, user_id: int, connection_id: str) -> None:
        with self._lock:
            previous = self._user_by_connection.get(connection_id)
            if previous is not None and previous != user_id:
                self._drop(connection_id, previous)
            self._connections_by_user.setdefault(user_id, set()).add(connection_id)
            self._user_by_connection[connection_id] = user_id
        logger.debug("User %s connected (connection=%s)", user_id, connection_id)

    def user_disconnected(self, connection_id: str) -> Optional[int]:
        """Forget a connection. Returns the owning user id, or None if unknown."""
        with self._lock:
            user_id = self._user_by_connection.get(connection_id)
            if user_id is None:
                return None
            self._drop(connection_id, user_id)
        logger.debug("User %s disconnected (connection=%s)", user_id, connection_id)
        return user_id

    def _drop(self, connection_id: str, user_id: int) -> None:
        self._user_by_connection.pop(connection_id, None)
        connections = self._connections_by_user.get(user_id)
        if connections is None:
            return
        connections.discard(connection_id)
        if not connections:
            del self._connections_by_user[user_id]

    def is_user_online(self, user_id: int) -> bool:
        with self._lock:
            return bool(self._connections_by_user.get(user_id))

    def get_online_user_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._connections_by_user)

    def get_user_connection_ids(self, user_id: int) -> List[str]:
        with self._lock:
            return sorted(self._connections_by_user.get(user_id, ()))

    def get_user_id_by_connection_id(self, connection_id: str) -> Optional[int]:
        with self._lock:
            return self._user_by_connection.get(connection_id)


_presence_service = UserPresenceService()


def get_presence_service() -> UserPresenceService:
    return _presence_service
