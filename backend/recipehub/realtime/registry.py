# recipehub/realtime/registry.py
"""
Connection registry: user id -> set of live connections (one per device).
"""
import logging
from typing import Dict, Set

from .connection import Connection
from .subscriptions import canonical_id

logger = logging.getLogger("uvicorn.error")


class ConnectionRegistry:
    """
    A connection is registered under at most one user at a time, and a user
    entry disappears as soon as its last connection is unregistered.
    """

    def __init__(self):
        self._by_user: Dict[str, Set[Connection]] = {}
        self._owner: Dict[Connection, str] = {}

    def register(self, user_id, conn: Connection) -> None:
        """Add conn under user_id. Repeating the same pair changes nothing."""
        key = canonical_id(user_id)
        previous = self._owner.get(conn)
        if previous is not None and previous != key:
            self.unregister(previous, conn)
        self._by_user.setdefault(key, set()).add(conn)
        self._owner[conn] = key

    def unregister(self, user_id, conn: Connection) -> None:
        """Remove conn from user_id's set; no-op when it is not there."""
        key = canonical_id(user_id)
        conns = self._by_user.get(key)
        if conns is None or conn not in conns:
            return
        conns.discard(conn)
        if not conns:
            del self._by_user[key]
        if self._owner.get(conn) == key:
            del self._owner[conn]

    def connections(self, user_id) -> Set[Connection]:
        """Snapshot of the user's live connections."""
        return set(self._by_user.get(canonical_id(user_id), ()))

    def owner_of(self, conn: Connection) -> str | None:
        return self._owner.get(conn)

    def user_count(self) -> int:
        return len(self._by_user)

    async def send_to_user(self, user_id, payload: dict) -> int:
        """
        Deliver payload to every connection of the user.

        An offline user is not an error. A payload without a "type" is tagged
        "unknown" so clients can still discriminate it.

        Returns:
            Number of connections the payload was delivered to
        """
        message = dict(payload)
        if not message.get("type"):
            message["type"] = "unknown"
        targets = self.connections(user_id)
        delivered = 0
        for conn in targets:
            if await conn.send(message):
                delivered += 1
        logger.debug("[registry] user %s: %s delivered to %d/%d",
                     canonical_id(user_id), message["type"], delivered, len(targets))
        return delivered
