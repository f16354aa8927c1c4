# recipehub/realtime/subscriptions.py
"""
Recipe topic subscriptions: recipe id -> set of connections interested in its updates.
"""
import logging
from typing import Dict, Set

from .connection import Connection

logger = logging.getLogger("uvicorn.error")


def canonical_id(value) -> str:
    """
    Canonical string form of a recipe or user identifier.

    12, 12.0, "12" and " 12 " all map to "12", so a topic subscribed with a
    number can be published to with its string form and vice versa.

    Raises:
        ValueError: for None, booleans and blank strings
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"invalid identifier: {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    if not text:
        raise ValueError("invalid identifier: blank")
    return text


class SubscriptionTable:
    """
    Topic table with a reverse index so a closing connection can be removed
    from every topic without scanning the whole table.
    Empty topic sets are removed, never left behind.
    """

    def __init__(self):
        # Example: {"42": {conn1, conn2}, "7": {conn1}}
        self._topics: Dict[str, Set[Connection]] = {}
        self._by_conn: Dict[Connection, Set[str]] = {}

    def subscribe(self, recipe_id, conn: Connection) -> None:
        key = canonical_id(recipe_id)
        self._topics.setdefault(key, set()).add(conn)
        self._by_conn.setdefault(conn, set()).add(key)
        logger.debug("[subs] %s subscribed to recipe %s", conn.id, key)

    def unsubscribe(self, recipe_id, conn: Connection) -> None:
        key = canonical_id(recipe_id)
        subscribers = self._topics.get(key)
        if subscribers is not None:
            subscribers.discard(conn)
            if not subscribers:
                del self._topics[key]
        topics = self._by_conn.get(conn)
        if topics is not None:
            topics.discard(key)
            if not topics:
                del self._by_conn[conn]

    def unsubscribe_all(self, conn: Connection) -> int:
        """
        Remove a connection from every topic. Called when the connection closes.

        Returns:
            Number of topics the connection was removed from
        """
        topics = self._by_conn.pop(conn, set())
        for key in topics:
            subscribers = self._topics.get(key)
            if subscribers is None:
                continue
            subscribers.discard(conn)
            if not subscribers:
                del self._topics[key]
        return len(topics)

    def subscribers(self, recipe_id) -> Set[Connection]:
        """Snapshot of a topic's subscribers (empty set when nobody listens)."""
        return set(self._topics.get(canonical_id(recipe_id), ()))

    def topics_of(self, conn: Connection) -> Set[str]:
        return set(self._by_conn.get(conn, ()))

    def topic_count(self) -> int:
        return len(self._topics)

    async def publish(self, recipe_id, payload: dict) -> int:
        """
        Deliver payload to every subscriber of the recipe.
        No subscribers is not an error.

        Returns:
            Number of connections the payload was delivered to
        """
        targets = self.subscribers(recipe_id)
        delivered = 0
        for conn in targets:
            if await conn.send(payload):
                delivered += 1
        logger.debug("[subs] recipe %s: delivered to %d/%d", canonical_id(recipe_id), delivered, len(targets))
        return delivered
