from fastapi import APIRouter, Depends

from app.api.deps import get_cache
from app.schemas.entries import CacheStatsOut, ClearCacheOut
from app.services.ttl_cache import TTLCache
from app.utils.log import app_logger

router = APIRouter(tags=["Cache"])


@router.get("/cache-stats", response_model=CacheStatsOut, summary="Cache statistics")
def get_stats(cache: TTLCache = Depends(get_cache)) -> CacheStatsOut:
    return CacheStatsOut(**cache.stats())


@router.api_route(
    "/clear-cache",
    methods=["GET", "POST"],
    response_model=ClearCacheOut,
    summary="Drop every cached window",
)
def clear_cache(cache: TTLCache = Depends(get_cache)) -> ClearCacheOut:
    dropped = len(cache)
    cache.clear()
    app_logger.info("api.cache.cleared", dropped=dropped)
    return ClearCacheOut(message="Cache cleared successfully")
