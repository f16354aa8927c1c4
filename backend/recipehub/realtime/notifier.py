# recipehub/realtime/notifier.py
"""
Outbound fan-out API consumed by the HTTP layer.

Delivery is best effort: the caller awaits the fan-out as part of its request,
but a socket that closes concurrently simply misses the frame.
"""
import logging

from recipehub.schemas.realtime import ForceLogoutFrame, RecipeUpdateFrame

from .registry import ConnectionRegistry
from .subscriptions import SubscriptionTable

logger = logging.getLogger("uvicorn.error")


class Notifier:
    def __init__(self, registry: ConnectionRegistry, subscriptions: SubscriptionTable):
        self.registry = registry
        self.subscriptions = subscriptions

    async def notify_user(self, user_id, event: dict) -> int:
        """Send an account-level event to every open connection of the user."""
        delivered = await self.registry.send_to_user(user_id, event)
        logger.info("[notify] user %s <- %s (%d connection(s))", user_id, event.get("type") or "unknown", delivered)
        return delivered

    async def notify_recipe_subscribers(self, recipe_id, event: dict | None = None) -> int:
        """
        Send a recipe event to everyone subscribed to the recipe.
        Call only after the mutation is committed.
        """
        payload = RecipeUpdateFrame(recipeId=recipe_id).model_dump()
        if event:
            payload.update(event)
            payload["recipeId"] = recipe_id
        delivered = await self.subscriptions.publish(recipe_id, payload)
        logger.info("[notify] recipe %s <- %s (%d subscriber(s))", recipe_id, payload["type"], delivered)
        return delivered

    async def force_logout(self, user_id, message: str = "You have been logged out") -> int:
        return await self.notify_user(user_id, ForceLogoutFrame(message=message).model_dump())
