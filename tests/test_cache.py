"""Tests for the response cache backends."""

import json

import pytest

from storefront.config import Settings
from storefront.services import RedisResponseCache, ResponseCache, build_cache

from conftest import FakeClock


class RecordingRedis:
    """Stands in for a redis.asyncio client; keeps values and expiry in dicts."""

    def __init__(self):
        self.values = {}
        self.expiry = {}
        self.closed = False

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value, ex=None):
        self.values[key] = value
        self.expiry[key] = ex

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
async def test_memory_cache_expires_after_ttl():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=60, clock=clock)

    await cache.set("associations", [{"frequency": 3}])
    clock.advance(59.9)
    assert await cache.get("associations") == [{"frequency": 3}]

    clock.advance(0.1)
    assert await cache.get("associations") is None


@pytest.mark.asyncio
async def test_memory_cache_per_entry_ttl_override():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=3600, clock=clock)

    await cache.set("short", 1, ttl_seconds=5)
    await cache.set("long", 2)
    clock.advance(10)

    assert await cache.get("short") is None
    assert await cache.get("long") == 2


@pytest.mark.asyncio
async def test_memory_cache_keys_are_namespaced():
    a = ResponseCache(namespace="a")
    await a.set("associations", "x")

    assert list(a._data) == ["a:associations"]
    assert await ResponseCache(namespace="b").get("associations") is None


@pytest.mark.asyncio
async def test_memory_cache_keeps_empty_results():
    cache = ResponseCache()
    await cache.set("associations", [])

    assert await cache.get("associations") == []


@pytest.mark.asyncio
async def test_redis_cache_stores_json_with_expiry():
    client = RecordingRedis()
    cache = RedisResponseCache(client, ttl_seconds=3600, namespace="shop")
    rows = [{"product1": "Red Shirt", "product2": "Blue Jeans", "frequency": 12}]

    await cache.set("associations", rows)

    assert json.loads(client.values["shop:associations"]) == rows
    assert client.expiry["shop:associations"] == 3600
    assert await cache.get("associations") == rows
    assert await cache.get("missing") is None

    await cache.close()
    assert client.closed


def test_build_cache_defaults_to_memory():
    cache = build_cache(Settings(cache_ttl_seconds=120, cache_namespace="ns"))

    assert isinstance(cache, ResponseCache)
    assert cache.ttl_seconds == 120
    assert cache.namespace == "ns"


def test_build_cache_redis_backend():
    cache = build_cache(Settings(cache_backend="redis", redis_url="redis://localhost:6379/3"))

    assert isinstance(cache, RedisResponseCache)
    assert cache.ttl_seconds == 3600


def test_build_cache_rejects_unknown_backend():
    with pytest.raises(RuntimeError):
        build_cache(Settings(cache_backend="memcached"))
