"""
API routes package initialization.
"""

from fastapi import APIRouter

from ai_editor.api.ai import router as ai_router
from ai_editor.api.cache import router as cache_router

# Create main API router with v1 versioning
api_router = APIRouter(prefix="/api/v1")

# Include all sub-routers
api_router.include_router(ai_router)
api_router.include_router(cache_router)

__all__ = ["api_router"]
