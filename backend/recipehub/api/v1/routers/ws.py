# recipehub/api/v1/routers/ws.py
from fastapi import APIRouter, WebSocket

router = APIRouter()


@router.websocket("/ws")
async def ws_recipes(ws: WebSocket):
    """
    WebSocket endpoint for live recipe updates and forced logout.

    Connect with ``/ws?token=<access token>``, then send
    {"type": "subscribe_recipe", "recipeId": 42} to receive
    {"type": "recipe_update", "recipeId": 42} whenever that recipe changes.
    A {"type": "force_logout", ...} frame arrives when the account is logged
    out from all devices.
    """
    await ws.app.state.realtime.gateway.serve(ws)
