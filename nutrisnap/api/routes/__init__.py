"""
API routes.

Contains the authentication and profile endpoints consumed by the
NutriSnap mobile client.
"""

from fastapi import APIRouter

from nutrisnap.api.routes.auth import router as auth_router
from nutrisnap.api.routes.profile import router as profile_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(profile_router)

__all__ = ["router"]
