"""API route aggregation.

All routers registered here get mounted in main.py. Paths are at the
root (/health, /stats, /broadcast) because producers and load balancers
already call them there.
"""

from fastapi import APIRouter

from eventrelay.api.broadcast import router as broadcast_router
from eventrelay.api.health import router as health_router
from eventrelay.api.stats import router as stats_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(stats_router, tags=["stats"])
api_router.include_router(broadcast_router, tags=["broadcast"])
