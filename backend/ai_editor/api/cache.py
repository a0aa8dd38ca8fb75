"""
Cache management API routes.
"""

from fastapi import APIRouter, Depends, HTTPException

from ai_editor.api.deps import get_response_cache
from ai_editor.core.logging import get_logger
from ai_editor.schemas import CacheStatsResponse
from ai_editor.services.response_cache import ResponseCache

logger = get_logger()

router = APIRouter(prefix="/cache", tags=["Cache"])


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(cache: ResponseCache = Depends(get_response_cache)):
    """
    Entry count and hit/miss counters of the response cache.
    """
    return CacheStatsResponse(**cache.stats())


@router.delete("/{key}")
async def delete_cache_entry(
    key: str,
    cache: ResponseCache = Depends(get_response_cache),
):
    """
    Delete one cached response.
    """
    if not cache.delete(key):
        raise HTTPException(status_code=404, detail="Cache entry not found")

    logger.info("Deleted cache entry: %s", key)

    return {"message": "Cache entry deleted"}


@router.delete("")
async def clear_cache(cache: ResponseCache = Depends(get_response_cache)):
    """
    Clear all cached responses.
    """
    count = cache.clear()

    logger.info("Cleared %d cached responses", count)

    return {"message": f"Cleared {count} cached responses"}
