"""Stats endpoint — who is connected right now.

Learn: Reads one registry snapshot, so connected_clients always equals
len(client_ids) even while clients come and go.
"""

from fastapi import APIRouter, Depends

from eventrelay.realtime.dependencies import get_registry
from eventrelay.realtime.registry import ConnectionRegistry
from eventrelay.schemas.envelope import StatsRead

router = APIRouter()


@router.get("/stats", response_model=StatsRead)
async def stats(registry: ConnectionRegistry = Depends(get_registry)):
    """Number and ids of currently connected WebSocket clients."""
    snapshot = await registry.snapshot()
    return StatsRead(
        connected_clients=snapshot.count,
        client_ids=sorted(snapshot.ids),
    )
