# recipehub/schemas/realtime.py
"""
Pydantic schemas for WebSocket frames.
Inbound frames are parsed leniently (unknown fields and types are allowed);
outbound frames always carry a discriminating "type" field.
"""
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict


class InboundFrame(BaseModel):
    """
    Control message sent by a client.
    Example: {"type": "subscribe_recipe", "recipeId": 42}
    """
    model_config = ConfigDict(extra="allow")

    type: Any = None
    recipeId: Any = None  # string or number; checked by the router


class ErrorFrame(BaseModel):
    type: Literal["error"] = "error"
    message: str


class RecipeUpdateFrame(BaseModel):
    type: Literal["recipe_update"] = "recipe_update"
    recipeId: Union[int, str]


class ForceLogoutFrame(BaseModel):
    type: Literal["force_logout"] = "force_logout"
    message: str = "You have been logged out"
