"""Broadcast endpoint — producers push events to every connected client.

Learn: POST /broadcast is called by the booking backend after each
write. The body is validated into an EventEnvelope (malformed bodies
get a 422 and nothing is sent), serialized once, and handed to the bus.

Outcomes:
- receivers > 0  → delivered to that many client buffers
- receivers == 0 → nobody connected; the event is dropped, still success
- success=false  → the bus itself refused (closed during shutdown)

No authentication: callers are trusted, the relay sits behind the
producer on a private network.
"""

import structlog
from fastapi import APIRouter, Depends

from eventrelay.errors import BusClosedError
from eventrelay.events.types import KNOWN_EVENTS
from eventrelay.realtime.bus import FanoutBus
from eventrelay.realtime.dependencies import get_bus
from eventrelay.schemas.envelope import BroadcastResult, EventEnvelope

logger = structlog.get_logger()
router = APIRouter()


@router.post(
    "/broadcast",
    response_model=BroadcastResult,
    response_model_exclude_none=True,
)
async def broadcast(envelope: EventEnvelope, bus: FanoutBus = Depends(get_bus)):
    """Fan one event out to all connected WebSocket clients."""
    try:
        receivers = await bus.publish(envelope.to_wire())
    except BusClosedError as e:
        logger.warning("relay.broadcast_failed", event_type=envelope.event, error=str(e))
        return BroadcastResult(success=False, error=str(e))

    known = envelope.event in KNOWN_EVENTS
    if receivers:
        logger.info(
            "relay.broadcast", event_type=envelope.event, receivers=receivers, known=known
        )
    else:
        logger.info("relay.broadcast_dropped", event_type=envelope.event, known=known)
    return BroadcastResult(success=True, receivers=receivers)
