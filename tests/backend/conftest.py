import asyncio
import json
import os
import uuid

import fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from recipehub.core import db as db_module
from recipehub.core.revocation import RevocationStore
from recipehub.core.security import hash_password
from recipehub.core.tokens import TokenValidator
from recipehub.main import app, init_state
from recipehub.models.user import User
from recipehub.realtime.connection import Connection, ConnectionState
from recipehub.realtime.hub import RealtimeHub


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


class FakeWebSocket:
    """
    In-memory stand-in for starlette's WebSocket.
    Frames sent by the server are decoded into `sent`; frames for the server
    are queued with push_text / push_json / push_disconnect.
    """

    def __init__(self, token: str | None = None):
        self.query_params = {} if token is None else {"token": token}
        self.accepted = False
        self.closed = False
        self.close_code = None
        self.sent = []
        self._inbox = asyncio.Queue()

    async def accept(self):
        self.accepted = True

    async def send_text(self, text: str):
        if self.closed:
            raise RuntimeError("Cannot send once a close message has been sent.")
        self.sent.append(json.loads(text))

    async def close(self, code: int = 1000):
        if self.closed:
            raise RuntimeError("Cannot call close twice.")
        self.closed = True
        self.close_code = code

    async def receive(self):
        return await self._inbox.get()

    def push_text(self, text: str):
        self._inbox.put_nowait({"type": "websocket.receive", "text": text})

    def push_json(self, payload):
        self.push_text(json.dumps(payload))

    def push_disconnect(self, code: int = 1000):
        self._inbox.put_nowait({"type": "websocket.disconnect", "code": code})

    def frames(self, frame_type: str):
        return [f for f in self.sent if f.get("type") == frame_type]


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest.fixture
def fake_ws():
    """Factory for FakeWebSocket instances."""
    return FakeWebSocket


@pytest.fixture
def open_conn():
    """Factory for OPEN connections wrapping a FakeWebSocket (as the gateway leaves them)."""

    def _open(user_id=None) -> Connection:
        conn = Connection(FakeWebSocket())
        conn.state = ConnectionState.OPEN
        conn.user_id = None if user_id is None else str(user_id)
        return conn

    return _open


@pytest.fixture
def eventually():
    """Poll a predicate until it holds, yielding to the event loop in between."""

    async def _eventually(predicate, timeout: float = 1.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.005)

    return _eventually


@pytest_asyncio.fixture
async def fake_redis():
    redis = fakeredis.FakeAsyncRedis(decode_responses=True)
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture
def revocation(fake_redis):
    return RevocationStore(fake_redis)


@pytest.fixture
def hub(revocation):
    """A fresh realtime hub backed by the fake revocation store."""
    return RealtimeHub(TokenValidator(revocation), auth_timeout=1.0)


@pytest_asyncio.fixture
async def client(fake_redis):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB,
    a fake Redis and a fresh realtime hub.
    """
    await _init_test_db()
    init_state(app, redis=fake_redis)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create users directly via ORM.
    """

    async def _create_user(password: str = "UserPass!23") -> tuple[User, str]:
        user = await User.create(
            name=f"cook_{uuid.uuid4().hex[:6]}",
            email=f"{uuid.uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers
