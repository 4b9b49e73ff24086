"""Tests for cache-aside resource fetching and the auth session cache."""

from unittest.mock import AsyncMock

import pytest

from deskcache.core.cache import CacheTag
from deskcache.services.auth_service import CURRENT_USER_KEY, AuthSession
from deskcache.services.resource_service import (
    RESOURCE_POLICIES,
    ResourceCache,
    build_cache_key,
    get_policy,
)


@pytest.fixture
def resources(cache):
    return ResourceCache(cache)


# ---------------------------------------------------------------------------
# build_cache_key (pure function)
# ---------------------------------------------------------------------------

class TestBuildCacheKey:
    def test_no_params(self):
        assert build_cache_key("chamados") == "chamados"

    def test_params_sorted(self):
        a = build_cache_key("chamados", {"tipo": "rede", "status": "aberto"})
        b = build_cache_key("chamados", {"status": "aberto", "tipo": "rede"})
        assert a == b == "chamados_status=aberto&tipo=rede"

    def test_empty_values_dropped(self):
        assert build_cache_key("chamados", {"status": "aberto", "setorId": None, "tipo": ""}) == (
            "chamados_status=aberto"
        )

    def test_all_empty_collapses_to_resource(self):
        assert build_cache_key("users", {"q": None}) == "users"


class TestPolicies:
    def test_known_resources(self):
        assert set(RESOURCE_POLICIES) == {
            "chamados", "users", "equipamentos", "setores", "dashboard", "historico",
        }

    def test_ttls_in_ms(self):
        assert get_policy("dashboard").ttl == 2 * 60 * 1000
        assert get_policy("setores").ttl == 60 * 60 * 1000

    def test_unknown_resource_raises(self):
        with pytest.raises(KeyError):
            get_policy("nope")


# ---------------------------------------------------------------------------
# ResourceCache.fetch
# ---------------------------------------------------------------------------

class TestFetch:
    @pytest.mark.asyncio
    async def test_miss_fetches_and_caches(self, resources, cache):
        fetcher = AsyncMock(return_value=[{"id": 1}])
        result = await resources.fetch("chamados", fetcher)
        assert result == [{"id": 1}]
        fetcher.assert_awaited_once()
        assert cache.has("chamados")

    @pytest.mark.asyncio
    async def test_hit_skips_fetcher(self, resources):
        fetcher = AsyncMock(return_value=[{"id": 1}])
        await resources.fetch("users", fetcher)
        await resources.fetch("users", fetcher)
        assert fetcher.await_count == 1

    @pytest.mark.asyncio
    async def test_params_produce_separate_entries(self, resources, cache):
        fetcher = AsyncMock(side_effect=[["open"], ["closed"]])
        assert await resources.fetch("chamados", fetcher, {"status": "aberto"}) == ["open"]
        assert await resources.fetch("chamados", fetcher, {"status": "fechado"}) == ["closed"]
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_expired_entry_refetches(self, resources, clock):
        fetcher = AsyncMock(side_effect=[{"total": 1}, {"total": 2}])
        await resources.fetch("dashboard", fetcher)
        clock.advance(2 * 60 + 1)
        assert await resources.fetch("dashboard", fetcher) == {"total": 2}

    @pytest.mark.asyncio
    async def test_skip_cache_always_fetches(self, resources, cache):
        fetcher = AsyncMock(return_value=[])
        await resources.fetch("setores", fetcher, skip_cache=True)
        await resources.fetch("setores", fetcher, skip_cache=True)
        assert fetcher.await_count == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_fetch_error_propagates_and_caches_nothing(self, resources, cache):
        fetcher = AsyncMock(side_effect=RuntimeError("Failed to fetch chamados"))
        with pytest.raises(RuntimeError):
            await resources.fetch("chamados", fetcher)
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_none_result_not_cached(self, resources, cache):
        fetcher = AsyncMock(return_value=None)
        assert await resources.fetch("users", fetcher) is None
        assert len(cache) == 0


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_invalidate_drops_whole_family(self, resources, cache):
        fetcher = AsyncMock(return_value=["x"])
        await resources.fetch("chamados", fetcher, {"status": "aberto"})
        await resources.fetch("chamados", fetcher, {"status": "fechado"})
        await resources.fetch("setores", fetcher)

        assert resources.invalidate("chamados") == 2
        assert cache.keys() == ["setores"]

    @pytest.mark.asyncio
    async def test_forget_drops_single_variant(self, resources, cache):
        fetcher = AsyncMock(return_value=["x"])
        await resources.fetch("chamados", fetcher, {"status": "aberto"})
        await resources.fetch("chamados", fetcher)
        resources.forget("chamados", {"status": "aberto"})
        assert cache.keys() == ["chamados"]

    @pytest.mark.asyncio
    async def test_shared_stats_tag(self, resources, cache):
        fetcher = AsyncMock(return_value={})
        await resources.fetch("dashboard", fetcher)
        await resources.fetch("historico", fetcher)
        assert cache.invalidate_by_tag(CacheTag.STATS) == 2


# ---------------------------------------------------------------------------
# AuthSession
# ---------------------------------------------------------------------------

class TestAuthSession:
    def test_login_caches_principal(self, cache):
        auth = AuthSession(cache)
        auth.login({"id": "42", "nome": "Ana"})
        assert auth.current_user() == {"id": "42", "nome": "Ana"}
        assert auth.is_authenticated()

    def test_principal_expires_after_an_hour(self, cache, clock):
        auth = AuthSession(cache)
        auth.login({"id": "42"})
        clock.advance(60 * 60 + 1)
        assert auth.current_user() is None

    def test_logout_invalidates_auth_tag(self, cache):
        auth = AuthSession(cache)
        auth.login({"id": "42"})
        cache.set("chamados", [], tags=[CacheTag.CHAMADOS])
        auth.logout()
        assert not cache.has(CURRENT_USER_KEY)
        assert cache.has("chamados")

    @pytest.mark.asyncio
    async def test_update_profile_refreshes_user_listings(self, cache):
        auth = AuthSession(cache)
        resources = ResourceCache(cache)
        auth.login({"id": "42", "nome": "Ana"})
        await resources.fetch("users", AsyncMock(return_value=[{"id": "42", "nome": "Ana"}]))

        auth.update_profile({"id": "42", "nome": "Ana Maria"})

        assert auth.current_user() == {"id": "42", "nome": "Ana Maria"}
        assert not cache.has("users")
