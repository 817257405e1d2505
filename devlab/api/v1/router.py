"""
API v1 router aggregation.
"""

from fastapi import APIRouter

from .endpoints import achievements, health, playground, progress, users

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(playground.router, prefix="", tags=["Playground"])
api_router.include_router(progress.router, prefix="", tags=["Progress"])
api_router.include_router(
    achievements.router,
    prefix="",
    tags=["Achievements"]
)
api_router.include_router(users.router, prefix="", tags=["Users"])
