# recipehub/realtime/gateway.py
"""
WebSocket gateway: handshake, bearer-token authentication, receive loop and cleanup.

Message flow:
1. Client connects to /ws?token=<access token>
2. Server accepts the socket and validates the token (signature, expiry, identity, revocation)
3. On failure: {"type": "error", "message": ...} is sent and the socket is closed
4. On success: the connection is registered under the token's user id
5. Client sends subscribe_recipe / unsubscribe_recipe frames (see router)
6. On disconnect the connection is removed from the registry and from every recipe topic
"""
import asyncio
import logging

from starlette.websockets import WebSocket, WebSocketDisconnect

from recipehub.core.errors import AuthenticationFailure
from recipehub.core.tokens import TokenValidator
from recipehub.schemas.realtime import ErrorFrame

from .connection import Connection, ConnectionState
from .registry import ConnectionRegistry
from .router import MessageRouter
from .subscriptions import SubscriptionTable

logger = logging.getLogger("uvicorn.error")

# 1008 = policy violation (RFC 6455), used for rejected credentials
WS_CLOSE_POLICY_VIOLATION = 1008
WS_CLOSE_INTERNAL_ERROR = 1011


class Gateway:
    def __init__(
        self,
        validator: TokenValidator,
        registry: ConnectionRegistry,
        subscriptions: SubscriptionTable,
        router: MessageRouter,
        auth_timeout: float = 10.0,
    ):
        self.validator = validator
        self.registry = registry
        self.subscriptions = subscriptions
        self.router = router
        self.auth_timeout = auth_timeout

    async def serve(self, websocket: WebSocket) -> None:
        """Run one connection from accept to cleanup."""
        conn = Connection(websocket)
        await websocket.accept()

        if not await self.authenticate(conn):
            return

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    await self.disconnect(conn, transport=False)
                    break
                raw = message.get("text")
                if raw is None:
                    raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")
                await self.router.dispatch(conn, raw)
        except WebSocketDisconnect:
            await self.disconnect(conn, transport=False)
        except Exception:
            logger.exception("[ws] receive loop failed for user %s", conn.user_id)
            await self.disconnect(conn, code=WS_CLOSE_INTERNAL_ERROR)
        finally:
            # Covers cancellation of the handler task
            if not conn.is_closed:
                conn.state = ConnectionState.CLOSED
            self._cleanup(conn)

    async def authenticate(self, conn: Connection) -> bool:
        """
        Resolve the connection's user from the "token" query parameter.

        Returns:
            True once the connection is registered and OPEN; False after the
            error frame was sent and the socket closed
        """
        conn.state = ConnectionState.AUTHENTICATING
        token = conn.websocket.query_params.get("token")
        try:
            verified = await asyncio.wait_for(self.validator.validate(token), timeout=self.auth_timeout)
        except AuthenticationFailure as e:
            await self._reject(conn, e.message)
            return False
        except asyncio.TimeoutError:
            await self._reject(conn, "Authentication timed out")
            return False
        except Exception:
            # Revocation store unreachable or similar; the client can retry later
            logger.exception("[ws] authentication failed unexpectedly for %s", conn.id)
            await self._reject(conn, "Authentication unavailable", code=WS_CLOSE_INTERNAL_ERROR)
            return False

        if conn.is_closed:
            return False
        conn.user_id = verified.user_id
        conn.state = ConnectionState.OPEN
        self.registry.register(verified.user_id, conn)
        logger.info("[ws] user %s connected (%s)", conn.user_id, conn.id)
        return True

    async def _reject(self, conn: Connection, reason: str, code: int = WS_CLOSE_POLICY_VIOLATION) -> None:
        logger.info("[ws] rejected connection %s: %s", conn.id, reason)
        await conn.send(ErrorFrame(message=reason).model_dump())
        await conn.close(code=code)

    async def disconnect(self, conn: Connection, code: int = 1000, *, transport: bool = True) -> None:
        """Close the connection (idempotent) and scrub it from the registry and all topics."""
        closed = await conn.close(code=code, transport=transport)
        self._cleanup(conn)
        if closed:
            logger.info("[ws] user %s disconnected (%s)", conn.user_id, conn.id)

    def _cleanup(self, conn: Connection) -> None:
        if conn.user_id is not None:
            self.registry.unregister(conn.user_id, conn)
        self.subscriptions.unsubscribe_all(conn)
