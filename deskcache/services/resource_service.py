"""Cache-aside fetching for the dashboard resources (tickets, users, ...)."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
from urllib.parse import urlencode

from deskcache.core.cache import CacheTag, TaggedTTLCache

logger = logging.getLogger(__name__)

MINUTE_MS = 60 * 1000


@dataclass(frozen=True)
class ResourcePolicy:
    name: str
    ttl: int
    tags: Tuple[CacheTag, ...]

    @property
    def primary_tag(self) -> CacheTag:
        return self.tags[0]


RESOURCE_POLICIES: Dict[str, ResourcePolicy] = {
    policy.name: policy
    for policy in (
        ResourcePolicy("chamados", 10 * MINUTE_MS, (CacheTag.CHAMADOS, CacheTag.TICKETS)),
        ResourcePolicy("users", 15 * MINUTE_MS, (CacheTag.USERS, CacheTag.AUTH)),
        ResourcePolicy("equipamentos", 30 * MINUTE_MS, (CacheTag.EQUIPMENT, CacheTag.ASSETS)),
        ResourcePolicy("setores", 60 * MINUTE_MS, (CacheTag.SECTORS, CacheTag.DEPARTMENTS)),
        ResourcePolicy("dashboard", 2 * MINUTE_MS, (CacheTag.DASHBOARD, CacheTag.STATS)),
        ResourcePolicy("historico", 10 * MINUTE_MS, (CacheTag.HISTORY, CacheTag.STATS)),
    )
}


def build_cache_key(resource: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Deterministic key from resource name + query params.

    Params are sorted by name and empty values dropped, so
    ``{"status": "open", "tipo": None}`` and ``{"status": "open"}`` share a key.
    """
    if not params:
        return resource
    cleaned = sorted((k, str(v)) for k, v in params.items() if v not in (None, ""))
    if not cleaned:
        return resource
    return f"{resource}_{urlencode(cleaned)}"


def get_policy(resource: str) -> ResourcePolicy:
    policy = RESOURCE_POLICIES.get(resource)
    if policy is None:
        raise KeyError(f"Unknown resource: {resource}")
    return policy


class ResourceCache:
    """Reads resources through the shared data cache.

    Fetchers are opaque async callables over whatever data source the app
    uses; their exceptions reach the caller and nothing is cached for them.
    """

    def __init__(self, cache: TaggedTTLCache):
        self.cache = cache

    async def fetch(
        self,
        resource: str,
        fetcher: Callable[[], Awaitable[Any]],
        params: Optional[Dict[str, Any]] = None,
        skip_cache: bool = False,
    ) -> Any:
        policy = get_policy(resource)
        key = build_cache_key(resource, params)

        if not skip_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        fresh = await fetcher()

        if not skip_cache and fresh is not None:
            self.cache.set(key, fresh, policy.ttl, policy.tags)
        return fresh

    def invalidate(self, resource: str) -> int:
        """Drop every cached variant of *resource* after a mutation."""
        removed = self.cache.invalidate_by_tag(get_policy(resource).primary_tag)
        logger.debug(f"Invalidated {removed} cached entries for {resource}")
        return removed

    def forget(self, resource: str, params: Optional[Dict[str, Any]] = None) -> None:
        """Drop one cached variant, leaving the rest of the family alone."""
        self.cache.remove(build_cache_key(resource, params))
