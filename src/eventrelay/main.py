"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan owns the process-scoped relay state: the fan-out bus
and the connection registry are built at startup, stored on app.state,
and the bus is closed at shutdown so every open session winds down.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventrelay import __version__
from eventrelay.api import api_router
from eventrelay.config import Settings, settings as default_settings
from eventrelay.logging import configure_logging
from eventrelay.realtime.bus import FanoutBus
from eventrelay.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown. Closing the bus ends every forwarder loop, which in
    turn unregisters every session.
    """
    settings: Settings = app.state.settings
    app.state.bus = FanoutBus(capacity=settings.subscriber_buffer)
    app.state.registry = ConnectionRegistry()
    logger.info(
        "relay.starting",
        version=__version__,
        server=settings.server_name,
        port=settings.port,
    )

    yield

    logger.info("relay.shutdown")
    await app.state.bus.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="Event Relay",
        description="Real-time fan-out of domain events to WebSocket clients",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → handler

    from eventrelay.middleware.request_id import RequestIdMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    from eventrelay.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: eventrelay.main:app)
app = create_app()
