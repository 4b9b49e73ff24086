"""Shared test fixtures — a controllable clock and fresh cache instances."""

import os

import pytest

# Set config env vars before any deskcache imports
os.environ.setdefault("CACHE_DEFAULT_TTL", "300000")
os.environ.setdefault("CACHE_MAX_ENTRIES", "1000")
os.environ.setdefault("CACHE_SWEEP_INTERVAL", "0")

from deskcache.core.cache import TaggedTTLCache  # noqa: E402
from deskcache.core.route_cache import RouteDecisionCache  # noqa: E402


class FakeClock:
    """Monotonic clock in seconds that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TaggedTTLCache(default_ttl=60_000, max_entries=1000, clock=clock)


@pytest.fixture
def route_cache(clock):
    return RouteDecisionCache(clock=clock)
