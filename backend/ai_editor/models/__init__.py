"""
Models package initialization.
"""

from ai_editor.models.cached_response import CachedResponse

__all__ = [
    "CachedResponse",
]
