"""Routing policy for the dashboard: who gets redirected where."""

from deskcache.core.route_cache import PASS_THROUGH

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"

PUBLIC_ROUTES = frozenset({LOGIN_PATH})

# Paths the policy applies to; everything else is left alone.
PROTECTED_PREFIXES = ("/dashboard", "/users", "/chamados", "/equipamentos", "/setores")

STATIC_PREFIXES = ("/_next/", "/static/", "/favicon.ico")
API_PREFIX = "/api/"


def is_static_or_api(path: str) -> bool:
    """Build artifacts, static files and API routes skip routing entirely."""
    return path.startswith(STATIC_PREFIXES) or path == API_PREFIX.rstrip("/") or path.startswith(API_PREFIX)


def matches_policy(path: str) -> bool:
    if path in ("/", LOGIN_PATH):
        return True
    return any(path == prefix or path.startswith(prefix + "/") for prefix in PROTECTED_PREFIXES)


def evaluate_route(path: str, is_authenticated: bool) -> str:
    """Return PASS_THROUGH or the path the request should be redirected to."""
    if path == "/":
        return DASHBOARD_PATH if is_authenticated else LOGIN_PATH

    if is_authenticated and path == LOGIN_PATH:
        return DASHBOARD_PATH

    if not is_authenticated and path not in PUBLIC_ROUTES:
        return LOGIN_PATH

    return PASS_THROUGH
