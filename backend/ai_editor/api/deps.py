"""
Request dependencies shared by the API routers.
"""

from fastapi import HTTPException, Request

from ai_editor.services.ai_service import AIService
from ai_editor.services.response_cache import ResponseCache


def get_ai_service(request: Request) -> AIService:
    """The AIService built in the application lifespan."""
    service = getattr(request.app.state, "ai_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="AI service not initialized")
    return service


def get_response_cache(request: Request) -> ResponseCache:
    cache = getattr(request.app.state, "response_cache", None)
    if cache is None:
        raise HTTPException(status_code=503, detail="Response cache not initialized")
    return cache
