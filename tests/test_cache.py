"""
Tests for cache strategies and the cache factory.
"""
import asyncio

import pytest

from linkpage_app.cache import CacheBackend, CacheFactory, InMemoryCache, NullCache, RedisCache


@pytest.fixture(autouse=True)
def reset_factory():
    CacheFactory.clear_instance()
    yield
    CacheFactory.clear_instance()


class TestInMemoryCache:
    def test_set_get_delete(self):
        cache = InMemoryCache()

        asyncio.run(cache.set("page:alice", "{}"))
        assert asyncio.run(cache.get("page:alice")) == "{}"
        assert asyncio.run(cache.delete("page:alice")) is True
        assert asyncio.run(cache.get("page:alice")) is None

    def test_delete_missing_key(self):
        assert asyncio.run(InMemoryCache().delete("nope")) is False

    def test_expired_entries_are_misses(self):
        cache = InMemoryCache()

        asyncio.run(cache.set("page:alice", "{}", ttl=-1))

        assert asyncio.run(cache.get("page:alice")) is None
        assert asyncio.run(cache.exists("page:alice")) is False


class FakeAsyncRedis:
    """Stands in for redis.asyncio.Redis; every command is a coroutine"""

    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value.encode("utf-8")
        return True

    async def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    async def exists(self, key):
        return 1 if key in self.data else 0

    async def flushdb(self):
        self.data.clear()


class BrokenAsyncRedis:
    async def get(self, key):
        raise ConnectionError("redis down")

    async def setex(self, key, ttl, value):
        raise ConnectionError("redis down")


class TestRedisCache:
    def test_commands_are_awaited(self):
        cache = RedisCache(FakeAsyncRedis())

        assert asyncio.run(cache.set("page:alice", "{}")) is True
        assert asyncio.run(cache.get("page:alice")) == "{}"
        assert asyncio.run(cache.exists("page:alice")) is True
        assert asyncio.run(cache.delete("page:alice")) is True
        assert asyncio.run(cache.get("page:alice")) is None

    def test_errors_degrade_to_misses(self):
        cache = RedisCache(BrokenAsyncRedis())

        assert asyncio.run(cache.get("page:alice")) is None
        assert asyncio.run(cache.set("page:alice", "{}")) is False


class TestNullCache:
    def test_always_misses(self):
        cache = NullCache()

        asyncio.run(cache.set("k", "v"))

        assert asyncio.run(cache.get("k")) is None


class TestCacheFactory:
    def test_memory_backend(self):
        assert isinstance(CacheFactory.create(CacheBackend.MEMORY), InMemoryCache)

    def test_null_backend(self):
        assert isinstance(CacheFactory.create(CacheBackend.NULL), NullCache)

    def test_singleton(self):
        first = CacheFactory.create(CacheBackend.MEMORY)
        second = CacheFactory.create(CacheBackend.NULL)
        assert first is second

    def test_unreachable_redis_falls_back_to_memory(self, monkeypatch):
        from linkpage_app.cache import factory

        monkeypatch.setattr(factory.settings, "redis_url", "redis://127.0.0.1:1/0")

        assert isinstance(CacheFactory.create(CacheBackend.REDIS), InMemoryCache)
