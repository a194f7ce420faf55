"""Connection registry — which WebSocket clients are live right now.

Learn: A plain dict behind one asyncio.Lock. Sessions register on
connect and unregister on disconnect; the /stats endpoint reads a
snapshot. Count and ids come from the same locked read so they can
never disagree with each other.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from eventrelay.errors import DuplicateConnectionError

STATUS_CONNECTED = "connected"


def new_connection_id() -> str:
    """Random UUID4 — 122 bits, collisions are not a practical concern."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ConnectionRecord:
    id: str
    status: str = STATUS_CONNECTED
    connected_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


@dataclass(frozen=True)
class RegistrySnapshot:
    count: int
    ids: frozenset[str]


class ConnectionRegistry:
    """Concurrency-safe map of connection id → ConnectionRecord."""

    def __init__(self):
        self._records: dict[str, ConnectionRecord] = {}
        self._lock = asyncio.Lock()

    async def register(self, connection_id: str) -> int:
        """Add a live connection. Returns the new total."""
        async with self._lock:
            if connection_id in self._records:
                raise DuplicateConnectionError(connection_id)
            self._records[connection_id] = ConnectionRecord(id=connection_id)
            return len(self._records)

    async def unregister(self, connection_id: str) -> int:
        """Remove a connection if present. Returns the remaining total."""
        async with self._lock:
            self._records.pop(connection_id, None)
            return len(self._records)

    async def count(self) -> int:
        async with self._lock:
            return len(self._records)

    async def ids(self) -> set[str]:
        async with self._lock:
            return set(self._records)

    async def snapshot(self) -> RegistrySnapshot:
        """Point-in-time count + ids from a single locked read."""
        async with self._lock:
            return RegistrySnapshot(
                count=len(self._records),
                ids=frozenset(self._records),
            )
