"""
Services package initialization.
"""

from ai_editor.services.ai_service import AIService, build_ai_service
from ai_editor.services.response_cache import (
    MemoryCacheStore,
    ResponseCache,
    SQLCacheStore,
    create_response_cache,
)

__all__ = [
    "AIService",
    "build_ai_service",
    "MemoryCacheStore",
    "ResponseCache",
    "SQLCacheStore",
    "create_response_cache",
]
