"""
API Router Module

Collects the route modules under one router mounted at /api.
"""

from fastapi import APIRouter

from lingotrack.api.sessions import router as sessions_router
from lingotrack.api.streaks import router as streaks_router

main_router = APIRouter()
main_router.include_router(streaks_router, prefix="/streaks", tags=["streaks"])
main_router.include_router(sessions_router, prefix="/sessions", tags=["sessions"])

__all__ = ['main_router']
