"""FastAPI dependencies for the process-scoped relay state.

Learn: The bus and registry live on app.state (set up in the lifespan)
rather than as module globals. Handlers ask for them with Depends(),
and tests get a fresh pair simply by building a fresh app.
HTTPConnection covers both plain requests and WebSockets.
"""

from starlette.requests import HTTPConnection

from eventrelay.config import Settings
from eventrelay.realtime.bus import FanoutBus
from eventrelay.realtime.registry import ConnectionRegistry


def get_bus(conn: HTTPConnection) -> FanoutBus:
    return conn.app.state.bus


def get_registry(conn: HTTPConnection) -> ConnectionRegistry:
    return conn.app.state.registry


def get_settings(conn: HTTPConnection) -> Settings:
    return conn.app.state.settings
