"""Health check endpoint.

Learn: Pure liveness — the relay has no external dependencies to probe.
If this answers, the event loop is running.
"""

from fastapi import APIRouter, Depends

from eventrelay.config import Settings
from eventrelay.realtime.dependencies import get_settings
from eventrelay.schemas.envelope import HealthRead

router = APIRouter()


@router.get("/health", response_model=HealthRead)
async def health_check(settings: Settings = Depends(get_settings)):
    return HealthRead(status="ok", server=settings.server_name)
