import asyncio
import datetime as dt
import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.websockets import WebSocketState
from tortoise import Tortoise

from license_service.core import db as db_module
from license_service.core.registry import ConnectionRegistry
from license_service.main import app
from license_service.models.license_key import LicenseKey


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.GENERATE_SCHEMAS = True
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest.fixture(autouse=True)
def fresh_app_state():
    """
    Give every test its own connection registry and the default heartbeat interval.
    """
    app.state.connections = ConnectionRegistry()
    app.state.heartbeat_interval = 30.0
    yield app.state


@pytest_asyncio.fixture
async def client():
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_license():
    """
    Factory fixture to create license records directly via ORM.
    """

    async def _create_license(
        key: str | None = None,
        app_name: str = "AppX",
        expires_in: dt.timedelta = dt.timedelta(days=30),
        is_unlimited: bool = False,
    ) -> LicenseKey:
        return await LicenseKey.create(
            key=key or f"key-{uuid.uuid4().hex[:8]}",
            app_name=app_name,
            expiration_date=dt.datetime.now(dt.timezone.utc) + expires_in,
            is_unlimited=is_unlimited,
        )

    return _create_license


class FakeWebSocket:
    """
    In-memory stand-in for starlette's WebSocket.
    Frames pushed with push_text/push_bytes/push_close are returned by receive();
    everything the server sends is recorded.
    """

    def __init__(self):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.sent: list[str] = []
        self.close_calls: list[tuple[int, str | None]] = []
        self.on_send = None  # Optional callback(text) run after each send_text

    def push_text(self, text: str) -> None:
        self.inbox.put_nowait({"type": "websocket.receive", "text": text})

    def push_bytes(self, data: bytes) -> None:
        self.inbox.put_nowait({"type": "websocket.receive", "bytes": data})

    def push_close(self, code: int = 1000) -> None:
        self.inbox.put_nowait({"type": "websocket.disconnect", "code": code})

    def push_error(self, exc: Exception) -> None:
        self.inbox.put_nowait(exc)

    async def receive(self) -> dict:
        message = await self.inbox.get()
        if isinstance(message, Exception):
            raise message
        if message["type"] == "websocket.disconnect":
            self.client_state = WebSocketState.DISCONNECTED
        return message

    async def send_text(self, text: str) -> None:
        self.sent.append(text)
        if self.on_send:
            self.on_send(text)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.close_calls.append((code, reason))
        self.application_state = WebSocketState.DISCONNECTED


@pytest.fixture
def fake_ws():
    """
    Factory fixture for FakeWebSocket instances (create inside the running test loop).
    """
    return FakeWebSocket


async def wait_until(predicate, timeout: float = 1.0, step: float = 0.005) -> bool:
    """Poll `predicate` until it is true or `timeout` seconds have passed."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(step)
    return predicate()


@pytest.fixture
def eventually():
    """
    Expose wait_until to tests without importing conftest.
    """
    return wait_until
