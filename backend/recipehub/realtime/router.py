# recipehub/realtime/router.py
"""
Inbound message dispatch for authenticated connections.

Recognized frames:
    {"type": "subscribe_recipe",   "recipeId": <string|number>}
    {"type": "unsubscribe_recipe", "recipeId": <string|number>}

Anything else is logged and ignored. Frames that are not JSON objects, or
that lack a usable recipeId, get an error frame back; the connection stays open.
"""
import logging

from pydantic import ValidationError

from recipehub.core.errors import MalformedMessage
from recipehub.schemas.realtime import ErrorFrame, InboundFrame

from .connection import Connection
from .subscriptions import SubscriptionTable

logger = logging.getLogger("uvicorn.error")


class MessageRouter:
    def __init__(self, subscriptions: SubscriptionTable):
        self.subscriptions = subscriptions
        self._handlers = {
            "subscribe_recipe": self._subscribe,
            "unsubscribe_recipe": self._unsubscribe,
        }

    async def dispatch(self, conn: Connection, raw: str) -> None:
        """Handle one raw frame received on conn. Frames on non-open connections are dropped."""
        if not conn.is_open:
            return
        try:
            frame = InboundFrame.model_validate_json(raw)
        except ValidationError:
            logger.info("[ws] malformed frame from user %s", conn.user_id)
            await conn.send(ErrorFrame(message="Invalid message format").model_dump())
            return

        handler = self._handlers.get(frame.type) if isinstance(frame.type, str) else None
        if handler is None:
            logger.info("[ws] unknown message type %r from user %s", frame.type, conn.user_id)
            return
        try:
            handler(conn, frame)
        except MalformedMessage as e:
            await conn.send(ErrorFrame(message=e.message).model_dump())

    @staticmethod
    def _recipe_id(frame: InboundFrame):
        recipe_id = frame.recipeId
        if recipe_id is None or (isinstance(recipe_id, str) and not recipe_id.strip()):
            raise MalformedMessage("recipeId is required")
        if isinstance(recipe_id, bool) or not isinstance(recipe_id, (int, float, str)):
            raise MalformedMessage("Invalid recipeId")
        return recipe_id

    def _subscribe(self, conn: Connection, frame: InboundFrame) -> None:
        recipe_id = self._recipe_id(frame)
        self.subscriptions.subscribe(recipe_id, conn)
        logger.info("[ws] user %s subscribed to recipe %s", conn.user_id, recipe_id)

    def _unsubscribe(self, conn: Connection, frame: InboundFrame) -> None:
        recipe_id = self._recipe_id(frame)
        self.subscriptions.unsubscribe(recipe_id, conn)
        logger.info("[ws] user %s unsubscribed from recipe %s", conn.user_id, recipe_id)
