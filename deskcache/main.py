import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from deskcache.core.cache import TaggedTTLCache
from deskcache.core.config import Settings, settings as default_settings
from deskcache.core.route_cache import RouteDecisionCache
from deskcache.services.auth_service import AuthSession
from deskcache.services.resource_service import ResourceCache
from deskcache.web.middleware import RouteGuardMiddleware
from deskcache.web.routers import cache as cache_routes
from deskcache.web.routers import pages

logger = logging.getLogger(__name__)


async def _sweep_loop(cache: TaggedTTLCache, interval: float):
    """Periodically drop expired entries so stats stay close to reality."""
    while True:
        await asyncio.sleep(interval)
        removed = cache.sweep()
        if removed:
            logger.debug(f"Background sweep removed {removed} expired entries")


def create_app(
    settings: Optional[Settings] = None,
    cache: Optional[TaggedTTLCache] = None,
    route_cache: Optional[RouteDecisionCache] = None,
) -> FastAPI:
    """Build the app and the single cache instances it owns."""
    settings = settings or default_settings
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    if cache is None:
        cache = TaggedTTLCache(
            default_ttl=settings.CACHE_DEFAULT_TTL,
            max_entries=settings.CACHE_MAX_ENTRIES,
            debug=settings.CACHE_DEBUG,
        )
    if route_cache is None:
        route_cache = RouteDecisionCache(max_entries=settings.ROUTE_CACHE_MAX_ENTRIES)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = None
        if settings.CACHE_SWEEP_INTERVAL > 0:
            sweeper = asyncio.create_task(_sweep_loop(cache, settings.CACHE_SWEEP_INTERVAL))
            logger.info(f"Cache sweep every {settings.CACHE_SWEEP_INTERVAL}s")
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                try:
                    await sweeper
                except asyncio.CancelledError:
                    pass

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.cache = cache
    app.state.route_cache = route_cache
    app.state.resources = ResourceCache(cache)
    app.state.auth = AuthSession(cache)

    app.add_middleware(RouteGuardMiddleware, route_cache=route_cache, cookie_name=settings.AUTH_COOKIE_NAME)

    app.include_router(cache_routes.router)
    app.include_router(pages.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
