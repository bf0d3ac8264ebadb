# tests/unit/test_cache.py
"""
针对 `cx_hub.cache` 模块的单元测试。

验证查询缓存的命中、TTL 过期、键的确定性，以及并发加载的去重。
"""

import asyncio

import pytest
from cachetools import LRUCache, TTLCache

from cx_hub.cache import CacheConfig, CacheType, LookupCache


def test_make_key_is_stable_regardless_of_argument_order() -> None:
    key1 = LookupCache.make_key("titlepair", title="X", source="en", target="de")
    key2 = LookupCache.make_key("titlepair", target="de", source="en", title="X")
    assert key1 == key2
    assert key1 != LookupCache.make_key("titlepair", title="X", source="en", target="fr")
    assert key1.startswith("titlepair|")


def test_cache_type_selects_backend() -> None:
    assert isinstance(LookupCache().cache, TTLCache)
    assert isinstance(LookupCache(CacheConfig(cache_type=CacheType.LRU)).cache, LRUCache)


@pytest.mark.asyncio
async def test_get_or_load_caches_values_including_none() -> None:
    cache = LookupCache()
    calls = 0

    async def loader() -> None:
        nonlocal calls
        calls += 1
        return None

    assert await cache.get_or_load("k", loader) is None
    assert await cache.get_or_load("k", loader) is None
    assert calls == 1


@pytest.mark.asyncio
async def test_ttl_expiration() -> None:
    """TTL 缓存会在指定时间后使条目失效（确定性测试）。"""
    current_time = 1000.0

    def timer() -> float:
        return current_time

    config = CacheConfig(maxsize=10, ttl=1, cache_type=CacheType.TTL)
    cache = LookupCache(config)
    cache.cache = TTLCache(maxsize=config.maxsize, ttl=config.ttl, timer=timer)

    values = iter(["first", "second"])

    async def loader() -> str:
        return next(values)

    assert await cache.get_or_load("k", loader) == "first"
    assert await cache.get_or_load("k", loader) == "first"
    current_time += 1.1
    assert await cache.get_or_load("k", loader) == "second"


@pytest.mark.asyncio
async def test_concurrent_loads_of_same_key_share_one_call() -> None:
    cache = LookupCache()
    calls = 0
    release = asyncio.Event()

    async def loader() -> str:
        nonlocal calls
        calls += 1
        await release.wait()
        return "value"

    tasks = [asyncio.create_task(cache.get_or_load("k", loader)) for _ in range(5)]
    await asyncio.sleep(0)
    release.set()

    assert await asyncio.gather(*tasks) == ["value"] * 5
    assert calls == 1


@pytest.mark.asyncio
async def test_errors_are_not_cached() -> None:
    cache = LookupCache()
    attempts = 0

    async def loader() -> str:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("flaky")
        return "ok"

    with pytest.raises(RuntimeError):
        await cache.get_or_load("k", loader)
    assert await cache.get_or_load("k", loader) == "ok"


@pytest.mark.asyncio
async def test_clear_empties_the_cache() -> None:
    cache = LookupCache()

    async def loader() -> int:
        return 1

    await cache.get_or_load("k", loader)
    cache.clear()
    assert "k" not in cache.cache
