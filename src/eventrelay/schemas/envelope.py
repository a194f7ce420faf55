"""Pydantic schemas for the relay's wire formats.

Learn: EventEnvelope is both the POST /broadcast request body and the
exact JSON text pushed to every WebSocket client. It is frozen — once a
producer's event is parsed, nothing downstream may alter it.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from eventrelay.events.types import CONNECTED


# ─── Events ───────────────────────────────────────────────


class EventEnvelope(BaseModel):
    """A published event: a name plus an arbitrary JSON payload."""

    model_config = ConfigDict(frozen=True)

    event: str = Field(..., min_length=1)
    data: Any = None

    def to_wire(self) -> str:
        """Serialize to the compact JSON text sent over the bus."""
        return self.model_dump_json()


def welcome_envelope(client_id: str, message: str) -> EventEnvelope:
    """The synthetic event every client receives right after connecting."""
    return EventEnvelope(
        event=CONNECTED,
        data={"clientId": client_id, "message": message},
    )


# ─── Responses ────────────────────────────────────────────


class BroadcastResult(BaseModel):
    """Outcome of POST /broadcast. Zero receivers is still a success."""

    success: bool
    receivers: Optional[int] = None
    error: Optional[str] = None


class StatsRead(BaseModel):
    connected_clients: int
    client_ids: list[str]


class HealthRead(BaseModel):
    status: str
    server: str
