"""Tests for the TTL cache and its namespaces."""

from __future__ import annotations

from auditwatch.services.cache import CacheHelpers, CacheNamespace, TTLCache


class TestTTLCache:
    def test_set_then_get(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("k", {"v": 1}, ttl=10)
        assert cache.get("k") == {"v": 1}
        assert cache.has("k")

    def test_expires_after_ttl(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("k", "v", ttl=10)
        clock.advance(10)
        assert cache.get("k") == "v"  # absent only once now > expiry
        clock.advance(0.5)
        assert cache.get("k") is None
        assert not cache.has("k")
        assert len(cache) == 0

    def test_get_default(self, clock):
        cache = TTLCache(clock=clock)
        assert cache.get("missing", "fallback") == "fallback"

    def test_default_ttl(self, clock):
        cache = TTLCache(default_ttl=5, clock=clock)
        cache.set("k", "v")
        clock.advance(6)
        assert not cache.has("k")

    def test_set_overwrites_and_resets_expiry(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("k", "old", ttl=5)
        clock.advance(4)
        cache.set("k", "new", ttl=5)
        clock.advance(4)
        assert cache.get("k") == "new"

    def test_delete_twice(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("k", "v")
        assert cache.delete("k") is True
        assert cache.delete("k") is False

    def test_cached_none_is_reported_by_has(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("k", None)
        assert cache.has("k")

    def test_purge_expired(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("short-1", 1, ttl=1)
        cache.set("short-2", 2, ttl=1)
        cache.set("long", 3, ttl=100)
        clock.advance(2)
        assert cache.purge_expired() == 2
        assert len(cache) == 1
        assert cache.get("long") == 3

    def test_clear(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0


class TestCacheNamespace:
    def test_keys_are_prefixed(self, clock):
        cache = TTLCache(clock=clock)
        ns = CacheNamespace(cache, "api", 30)
        ns.set("org:1", "page")
        assert cache.get("api:org:1") == "page"
        assert ns.get("org:1") == "page"

    def test_namespaces_do_not_collide(self, clock):
        helpers = CacheHelpers(TTLCache(clock=clock))
        helpers.api.set("x", "api-value")
        helpers.config.set("x", "config-value")
        assert helpers.api.get("x") == "api-value"
        assert helpers.config.get("x") == "config-value"

    def test_namespace_default_ttl(self, clock):
        cache = TTLCache(default_ttl=1000, clock=clock)
        ns = CacheNamespace(cache, "session", 10)
        ns.set("token", "abc")
        clock.advance(11)
        assert not ns.has("token")

    def test_clear_only_touches_own_prefix(self, clock):
        helpers = CacheHelpers(TTLCache(clock=clock))
        helpers.api.set("a", 1)
        helpers.api.set("b", 2)
        helpers.session.set("a", 3)
        assert helpers.api.clear() == 2
        assert helpers.session.get("a") == 3
