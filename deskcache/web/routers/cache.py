import logging

from fastapi import APIRouter, Request

from deskcache.core.cache import TaggedTTLCache
from deskcache.core.route_cache import RouteDecisionCache
from deskcache.models.schemas import CacheStatsResponse, InvalidateResponse

router = APIRouter(prefix="/cache", tags=["cache"])
logger = logging.getLogger(__name__)


def _stats(request: Request) -> CacheStatsResponse:
    cache: TaggedTTLCache = request.app.state.cache
    route_cache: RouteDecisionCache = request.app.state.route_cache
    stats = cache.get_stats()
    return CacheStatsResponse(
        size=stats.size,
        hits=stats.hits,
        misses=stats.misses,
        hit_rate=stats.hit_rate,
        route_entries=len(route_cache),
    )


@router.get("/stats", response_model=CacheStatsResponse)
def cache_stats(request: Request):
    return _stats(request)


@router.post("/clear", response_model=CacheStatsResponse)
def clear_cache(request: Request):
    request.app.state.cache.clear()
    logger.info("Data cache cleared")
    return _stats(request)


@router.post("/invalidate/{tag}", response_model=InvalidateResponse)
def invalidate_tag(tag: str, request: Request):
    removed = request.app.state.cache.invalidate_by_tag(tag)
    return InvalidateResponse(tag=tag, removed=removed)
