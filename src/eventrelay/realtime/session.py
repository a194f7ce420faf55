"""Per-connection session — one bus subscription paired with one WebSocket.

Learn: After the handshake, two loops run against the same socket:
1. forward() — bus subscription → WebSocket (the useful direction)
2. listen()  — WebSocket → nowhere; only notices keepalives and closes

They race inside one anyio task group. Whichever finishes first (client
gone, write failed, bus shut down) cancels the group's scope, so the
other loop is cancelled and awaited before the group exits. Cleanup runs
exactly once in `finally`, shielded so a cancelled handler still
unregisters.

State: CONNECTING → ESTABLISHED → CLOSING → CLOSED
"""

import enum

import anyio
import structlog
from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from eventrelay.errors import BusClosedError, DuplicateConnectionError
from eventrelay.realtime.bus import FanoutBus, Subscription
from eventrelay.realtime.registry import ConnectionRegistry, new_connection_id
from eventrelay.schemas.envelope import welcome_envelope

logger = structlog.get_logger()

KEEPALIVE = "ping"

# What a dead peer looks like on send or receive: Starlette raises
# WebSocketDisconnect or RuntimeError, uvicorn's ClientDisconnected is an OSError.
TRANSPORT_ERRORS = (WebSocketDisconnect, RuntimeError, OSError)


class SessionState(str, enum.Enum):
    CONNECTING = "connecting"
    ESTABLISHED = "established"
    CLOSING = "closing"
    CLOSED = "closed"


class ConnectionSession:
    """Lifecycle of one accepted WebSocket client."""

    def __init__(
        self,
        websocket: WebSocket,
        bus: FanoutBus,
        registry: ConnectionRegistry,
        *,
        welcome_message: str,
    ):
        self.websocket = websocket
        self.bus = bus
        self.registry = registry
        self.welcome_message = welcome_message
        self.id = new_connection_id()
        self.state = SessionState.CONNECTING
        self.subscription: Subscription | None = None
        self._registered = False

    async def run(self) -> None:
        """Drive the session from registration to cleanup.

        The WebSocket must already be accepted. Returns when the client
        is gone; never raises for per-connection transport faults.
        Every log record emitted while it runs carries client_id.
        """
        with structlog.contextvars.bound_contextvars(client_id=self.id):
            try:
                total = await self.registry.register(self.id)
                self._registered = True
                logger.info("relay.client_connected", total=total)
                self.subscription = await self.bus.subscribe(owner=self.id)
                await self._send_welcome()
                self.state = SessionState.ESTABLISHED
                await self._race()
            except BusClosedError:
                logger.info("relay.bus_closed")
            except DuplicateConnectionError:
                logger.error("relay.duplicate_client_id")
            finally:
                self.state = SessionState.CLOSING
                with anyio.CancelScope(shield=True):
                    await self._cleanup()
                self.state = SessionState.CLOSED

    async def forward(self) -> None:
        """Bus → client. Ends when the subscription closes or a write fails."""
        async for message in self.subscription:
            try:
                await self.websocket.send_text(message)
            except TRANSPORT_ERRORS as e:
                logger.debug("relay.send_failed", error=str(e))
                return

    async def listen(self) -> None:
        """Client → nowhere. Ends on close frame or stream error.

        Learn: The relay is outbound-only. A text "ping" keeps idle
        proxies from dropping the socket; everything else is ignored.
        """
        while True:
            try:
                message = await self.websocket.receive()
            except TRANSPORT_ERRORS as e:
                logger.debug("relay.receive_failed", error=str(e))
                return
            if message["type"] == "websocket.disconnect":
                return
            if message.get("text") == KEEPALIVE:
                continue  # keepalive, connection stays open

    # ─── Internals ────────────────────────────────────────

    async def _send_welcome(self) -> None:
        welcome = welcome_envelope(self.id, self.welcome_message)
        try:
            await self.websocket.send_text(welcome.to_wire())
        except TRANSPORT_ERRORS as e:
            # The listener will notice the dead socket on its first read
            logger.debug("relay.welcome_failed", error=str(e))

    async def _race(self) -> None:
        async with anyio.create_task_group() as tg:

            async def first_wins(loop) -> None:
                await loop()
                tg.cancel_scope.cancel()

            tg.start_soon(first_wins, self.forward)
            tg.start_soon(first_wins, self.listen)

    async def _cleanup(self) -> None:
        if self._registered:
            remaining = await self.registry.unregister(self.id)
            logger.info("relay.client_disconnected", remaining=remaining)
        if self.subscription is not None:
            if self.subscription.dropped:
                logger.info(
                    "relay.subscriber_dropped_total",
                    dropped=self.subscription.dropped,
                )
            await self.subscription.close()
        if self.websocket.client_state == WebSocketState.CONNECTED:
            try:
                await self.websocket.close()
            except TRANSPORT_ERRORS:
                pass  # peer already gone
