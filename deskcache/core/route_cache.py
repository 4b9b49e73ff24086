"""Short-lived memo of routing verdicts keyed by (path, authenticated)."""

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, NamedTuple, Optional

logger = logging.getLogger(__name__)

ROUTE_CACHE_TTL_SECONDS = 30
DEFAULT_MAX_ROUTE_ENTRIES = 10_000

# Verdict meaning "continue handling the request"; anything else is a redirect target.
PASS_THROUGH = "pass-through"


def route_cache_key(path: str, is_authenticated: bool) -> str:
    # The flag is always the last segment, so a ':' inside the path is harmless.
    return f"{path}:{'auth' if is_authenticated else 'anon'}"


class _RouteEntry(NamedTuple):
    result: str
    inserted_at: float


class RouteDecisionCache:
    """Memoizes routing verdicts for a fixed 30 second window.

    No tags and no explicit invalidation: the policy is pure, so a verdict
    only has to age out. The store is FIFO-bounded by ``max_entries`` so an
    unbounded set of request paths cannot grow it without limit.
    """

    ttl_seconds = ROUTE_CACHE_TTL_SECONDS

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ROUTE_ENTRIES,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._entries: "OrderedDict[str, _RouteEntry]" = OrderedDict()
        self._max_entries = max(1, max_entries)
        self._clock = clock or time.monotonic
        self._lock = threading.RLock()

    def lookup(self, path: str, is_authenticated: bool) -> Optional[str]:
        """Return the cached verdict, or None when absent or stale."""
        key = route_cache_key(path, is_authenticated)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at > self.ttl_seconds:
                del self._entries[key]
                return None
            return entry.result

    def remember(self, path: str, is_authenticated: bool, verdict: str) -> None:
        key = route_cache_key(path, is_authenticated)
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_entries:
                oldest, _ = self._entries.popitem(last=False)
                logger.debug(f"route cache full, evicted key={oldest}")
            self._entries[key] = _RouteEntry(verdict, self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
