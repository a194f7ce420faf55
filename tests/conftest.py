"""Test fixtures — a fresh relay per test.

Learn: Each test builds its own app via create_app(), so the bus and the
connection registry on app.state never leak between tests. httpx's
ASGITransport does not run the lifespan, so the `app` fixture enters it
explicitly; WebSocket tests use Starlette's TestClient, which runs the
lifespan itself when used as a context manager.

FakeWebSocket stands in for a Starlette WebSocket in session unit tests:
the test feeds inbound frames and inspects what the session sent.
"""

import asyncio

import pytest
import pytest_asyncio
from fastapi import WebSocketDisconnect
from httpx import ASGITransport, AsyncClient
from starlette.websockets import WebSocketState

from eventrelay.config import Settings
from eventrelay.main import create_app, lifespan
from eventrelay.realtime.bus import FanoutBus
from eventrelay.realtime.registry import ConnectionRegistry


def make_settings(**overrides) -> Settings:
    values = {"log_level": "WARNING", "subscriber_buffer": 256}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def settings():
    return make_settings()


@pytest_asyncio.fixture()
async def app(settings):
    """App with its lifespan running (bus + registry on app.state)."""
    app = create_app(settings)
    async with lifespan(app):
        yield app


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def bus():
    return FanoutBus(capacity=8)


@pytest.fixture()
def registry():
    return ConnectionRegistry()


async def wait_until(predicate, timeout: float = 1.0):
    """Poll an (async or sync) predicate until truthy or fail the test."""
    deadline = asyncio.get_running_loop().time() + timeout
    while True:
        result = predicate()
        if asyncio.iscoroutine(result):
            result = await result
        if result:
            return
        if asyncio.get_running_loop().time() > deadline:
            pytest.fail("condition not met in time")
        await asyncio.sleep(0.01)


class FakeWebSocket:
    """Minimal async stand-in for starlette.websockets.WebSocket."""

    def __init__(self):
        self.sent: list[str] = []
        self.inbound: asyncio.Queue = asyncio.Queue()
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.closed = False
        self.fail_sends = False

    async def send_text(self, text: str) -> None:
        if self.fail_sends:
            raise WebSocketDisconnect(code=1006)
        self.sent.append(text)

    async def receive(self) -> dict:
        message = await self.inbound.get()
        if message["type"] == "websocket.disconnect":
            self.client_state = WebSocketState.DISCONNECTED
        return message

    async def close(self, code: int = 1000) -> None:
        self.closed = True
        self.application_state = WebSocketState.DISCONNECTED

    # ─── Test controls ──────────────────────────────────

    def client_sends(self, text: str) -> None:
        self.inbound.put_nowait({"type": "websocket.receive", "text": text})

    def client_sends_bytes(self, data: bytes) -> None:
        self.inbound.put_nowait({"type": "websocket.receive", "bytes": data})

    def client_disconnects(self, code: int = 1000) -> None:
        self.inbound.put_nowait({"type": "websocket.disconnect", "code": code})


@pytest.fixture()
def fake_ws():
    """Factory so a test can open several fake clients."""
    return FakeWebSocket


@pytest.fixture()
def wait():
    return wait_until
