"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from pawfeed.api.v1.endpoints import pets, schedules

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    pets.router, prefix="/pets", tags=["Pets"]
)
api_router.include_router(
    schedules.router, prefix="/schedules", tags=["Feeding schedules"]
)
