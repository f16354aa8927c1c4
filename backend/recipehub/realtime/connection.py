# recipehub/realtime/connection.py
"""
Connection handle for one live WebSocket.

Lifecycle: CONNECTING -> AUTHENTICATING -> OPEN -> CLOSED.
CLOSED is reachable from every state and closing twice is a no-op.
Only OPEN connections receive deliveries.
"""
import enum
import json
import logging
import uuid

from starlette.websockets import WebSocket, WebSocketDisconnect

logger = logging.getLogger("uvicorn.error")


class ConnectionState(str, enum.Enum):
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    OPEN = "open"
    CLOSED = "closed"


class Connection:
    """
    Owned by the gateway for the lifetime of the socket.
    Hashes by identity, so it can be stored in registry and topic sets.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.id = uuid.uuid4().hex[:12]
        self.state = ConnectionState.CONNECTING
        self.user_id: str | None = None

    def __repr__(self) -> str:
        return f"<Connection {self.id} user={self.user_id} state={self.state.value}>"

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    @property
    def is_closed(self) -> bool:
        return self.state is ConnectionState.CLOSED

    async def send(self, payload: dict) -> bool:
        """
        Send one JSON frame. Frames to a closed connection are dropped.

        Returns:
            True if the frame was handed to the transport, False otherwise
        """
        if self.is_closed:
            return False
        try:
            await self.websocket.send_text(json.dumps(payload))
            return True
        except Exception as e:
            # Socket went away between the state check and the write
            logger.debug("[ws] send to %s failed: %r", self.id, e)
            return False

    async def close(self, code: int = 1000, *, transport: bool = True) -> bool:
        """
        Move to CLOSED and, unless the peer already disconnected, close the socket.

        Returns:
            True on the first call, False on any later call
        """
        if self.is_closed:
            return False
        self.state = ConnectionState.CLOSED
        if transport:
            try:
                await self.websocket.close(code=code)
            except (RuntimeError, WebSocketDisconnect) as e:
                logger.debug("[ws] close of %s ignored: %r", self.id, e)
        return True
