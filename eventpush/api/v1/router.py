"""API v1 router aggregation.

Health routes are open; everything else requires the x-api-key header.
"""

from fastapi import APIRouter, Depends

from eventpush.api.v1.dependencies import require_api_key
from eventpush.api.v1.endpoints import events, health, notifications

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["notifications"],
    dependencies=[Depends(require_api_key)],
)
api_router.include_router(
    events.router,
    prefix="/events",
    tags=["events"],
    dependencies=[Depends(require_api_key)],
)
