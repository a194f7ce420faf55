"""Request ID middleware — correlate a producer's broadcast with our logs.

Learn: Pure ASGI rather than BaseHTTPMiddleware, so WebSocket scopes
pass straight through untouched (sessions bind their own client_id).
For HTTP requests the ID comes from the incoming X-Request-ID header
when a producer sends one, otherwise a fresh UUID. It is bound into
structlog's contextvars only for the duration of the request, so
relay.broadcast records carry it, and echoed back on the response.
"""

import uuid

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

HEADER = "X-Request-ID"


class RequestIdMiddleware:
    """Tag every HTTP request with an ID; leave WebSockets alone."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(HEADER) or str(uuid.uuid4())

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[HEADER] = request_id
            await send(message)

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            await self.app(scope, receive, send_with_request_id)
