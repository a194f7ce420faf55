"""Publisher helper — push an event to the relay from another service.

Learn: This is fire-and-forget. A producer calls broadcast() after its
own database write; if the relay is down or slow the producer's request
must not fail, so every transport/HTTP error is logged and swallowed
here (and only here). A short timeout keeps API latency bounded.
"""

from typing import Any, Optional

import httpx
import structlog

from eventrelay.config import settings
from eventrelay.schemas.envelope import BroadcastResult

logger = structlog.get_logger()


async def broadcast(
    event: str,
    data: Optional[dict[str, Any]] = None,
    *,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[BroadcastResult]:
    """POST one event to the relay. Returns its reply, or None on failure.

    Pass `client` to reuse a connection pool (or an ASGI transport in
    tests); otherwise a throwaway client is created for the call.
    """
    target = url or settings.broadcast_url
    body = {"event": event, "data": data or {}}
    request_timeout = settings.broadcast_timeout if timeout is None else timeout

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=request_timeout) as c:
                r = await c.post(target, json=body)
        else:
            r = await client.post(target, json=body, timeout=request_timeout)
        r.raise_for_status()
        return BroadcastResult.model_validate(r.json())
    except (httpx.HTTPError, ValueError) as e:
        # Non-critical, log but do not throw
        logger.warning("relay.publish_failed", event_type=event, url=target, error=str(e))
        return None
