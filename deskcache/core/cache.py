"""In-memory tagged TTL cache shared by the data-fetching layer.

Entries expire lazily: a stale entry is only deleted when ``get`` touches it
(or when ``sweep`` runs). ``has`` reports staleness without deleting, so
``get_stats().size`` may count entries that are already expired.

Eviction is FIFO by insertion order. Reads never reorder entries.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 300_000
DEFAULT_MAX_ENTRIES = 1000


class CacheTag(str, Enum):
    """Known invalidation tags. Ad-hoc strings are still accepted."""

    CHAMADOS = "chamados"
    TICKETS = "tickets"
    USERS = "users"
    USER = "user"
    EQUIPMENT = "equipamentos"
    ASSETS = "assets"
    SECTORS = "setores"
    DEPARTMENTS = "departments"
    HISTORY = "historico"
    DASHBOARD = "dashboard"
    STATS = "stats"
    AUTH = "auth"
    PROFILE = "profile"


TagLike = Union[CacheTag, str]


def tag_name(tag: TagLike) -> str:
    # Enum members hash by name, so always compare on the plain string value.
    if isinstance(tag, CacheTag):
        return tag.value
    return str(tag)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    inserted_at: float
    ttl: float
    tags: frozenset

    def is_expired(self, now: float) -> bool:
        if self.ttl <= 0:
            return True
        return (now - self.inserted_at) * 1000 > self.ttl


@dataclass(frozen=True)
class CacheStats:
    size: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        """Hit percentage over all ``get`` calls since the last clear."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return round(self.hits / total * 100, 1)


class TaggedTTLCache:
    """Key/value store with per-entry TTL, tag invalidation and FIFO eviction.

    TTLs are in milliseconds. ``clock`` returns seconds and defaults to
    ``time.monotonic``; tests inject a fake one.

    Every public method holds an internal lock, so one instance can be shared
    between the event loop and the thread pool FastAPI uses for sync handlers.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_MS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Optional[Callable[[], float]] = None,
        debug: bool = False,
    ) -> None:
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._default_ttl = default_ttl
        self._max_entries = max(1, max_entries)
        self._clock = clock or time.monotonic
        self._log_level = logging.INFO if debug else logging.DEBUG
        self._hits = 0
        self._misses = 0
        self._lock = threading.RLock()

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for *key*, or *default* on a miss.

        A stale entry is deleted here and counted as a miss.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return default
            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.log(self._log_level, f"cache expired key={key}")
                return default
            self._hits += 1
            return entry.value

    def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        tags: Iterable[TagLike] = (),
    ) -> None:
        """Insert or replace *key*. Replacing drops the old TTL and tags."""
        with self._lock:
            # A full store gives up its oldest entry even when *key* is already
            # present. Replacing in place keeps the key's original FIFO slot.
            if len(self._entries) >= self._max_entries:
                oldest, _ = self._entries.popitem(last=False)
                logger.log(self._log_level, f"cache full, evicted key={oldest}")
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                inserted_at=self._clock(),
                ttl=self._default_ttl if ttl is None else ttl,
                tags=frozenset(tag_name(t) for t in tags),
            )

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry and reset the hit/miss counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def invalidate_by_tag(self, tag: TagLike) -> int:
        """Remove every entry tagged with *tag*. Returns how many were removed."""
        name = tag_name(tag)
        with self._lock:
            doomed = [key for key, entry in self._entries.items() if name in entry.tags]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.log(self._log_level, f"cache invalidated tag={name} removed={len(doomed)}")
        return len(doomed)

    def has(self, key: str) -> bool:
        """True if *key* holds a fresh entry.

        Unlike ``get`` this neither counts a hit/miss nor deletes a stale
        entry it finds; cleanup stays with ``get`` and ``sweep``.
        """
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def get_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._entries), hits=self._hits, misses=self._misses)

    def sweep(self) -> int:
        """Delete all expired entries. Returns the number removed."""
        with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.log(self._log_level, f"cache sweep removed={len(stale)}")
        return len(stale)

    def keys(self) -> list:
        """Snapshot of the tracked keys, oldest first."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"TaggedTTLCache(default_ttl={self._default_ttl}, "
            f"max_entries={self._max_entries}, size={len(self)})"
        )
