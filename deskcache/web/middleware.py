import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from deskcache.core.route_cache import PASS_THROUGH, RouteDecisionCache
from deskcache.core.routing import evaluate_route, is_static_or_api, matches_policy

logger = logging.getLogger(__name__)


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Redirects requests according to the routing policy.

    Static assets and API routes pass straight through. Everything the policy
    covers is looked up in the route cache first and only evaluated on a miss.
    """

    def __init__(self, app: ASGIApp, route_cache: RouteDecisionCache, cookie_name: str = "nextar_user"):
        super().__init__(app)
        self.route_cache = route_cache
        self.cookie_name = cookie_name

    def is_authenticated(self, request: Request) -> bool:
        return bool(request.cookies.get(self.cookie_name))

    def decide(self, path: str, is_authenticated: bool) -> str:
        verdict = self.route_cache.lookup(path, is_authenticated)
        if verdict is not None:
            return verdict

        verdict = evaluate_route(path, is_authenticated)
        self.route_cache.remember(path, is_authenticated, verdict)
        return verdict

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not matches_policy(path) or is_static_or_api(path):
            return await call_next(request)

        verdict = self.decide(path, self.is_authenticated(request))
        if verdict == PASS_THROUGH:
            return await call_next(request)

        logger.info(f"Redirecting {path} -> {verdict}")
        return RedirectResponse(str(request.url.replace(path=verdict, query="")), status_code=307)
