"""WebSocket endpoint — real-time event delivery to connected clients.

Learn: Each client connects to /ws. The handler:
1. Completes the handshake (a failure here is logged and dropped —
   no registry entry, no subscription)
2. Hands the socket to a ConnectionSession, which registers the client,
   subscribes to the bus, sends the "connected" welcome, and forwards
   every published event until either side goes away

No authentication — the relay only ever pushes public change events.
"""

import structlog
from fastapi import APIRouter, Depends, WebSocket

from eventrelay.config import Settings
from eventrelay.realtime.bus import FanoutBus
from eventrelay.realtime.dependencies import get_bus, get_registry, get_settings
from eventrelay.realtime.registry import ConnectionRegistry
from eventrelay.realtime.session import TRANSPORT_ERRORS, ConnectionSession

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/ws")
async def relay_websocket(
    websocket: WebSocket,
    bus: FanoutBus = Depends(get_bus),
    registry: ConnectionRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    """Accept a client and stream every broadcast event to it."""
    try:
        await websocket.accept()
    except TRANSPORT_ERRORS as e:
        logger.warning("relay.handshake_failed", error=str(e))
        return

    session = ConnectionSession(
        websocket,
        bus,
        registry,
        welcome_message=settings.welcome_message,
    )
    await session.run()
