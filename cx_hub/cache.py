# cx_hub/cache.py
"""本模块提供内存缓存，用于减少对知识库与 Action API 的重复查询。"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Union

from cachetools import LRUCache, TTLCache
from pydantic import BaseModel, Field

# 用于区分“缓存了 None”与“未命中”
_MISSING = object()


class CacheType(str, Enum):
    """定义了支持的缓存类型。"""

    TTL = "ttl"
    LRU = "lru"


class CacheConfig(BaseModel):
    """缓存配置模型。"""

    maxsize: int = Field(default=1000, gt=0)
    ttl: int = Field(default=3600, gt=0)
    cache_type: CacheType = CacheType.TTL


class LookupCache:
    """一个异步安全的查询结果缓存，按请求参数生成确定性的键。"""

    def __init__(self, config: CacheConfig | None = None):
        self.config = config or CacheConfig()
        self.cache: Union[LRUCache[str, Any], TTLCache[str, Any]]
        self._inflight: dict[str, asyncio.Future[Any]] = {}
        self._initialize_cache()

    def _initialize_cache(self) -> None:
        if self.config.cache_type is CacheType.TTL:
            self.cache = TTLCache(maxsize=self.config.maxsize, ttl=self.config.ttl)
        else:
            self.cache = LRUCache(maxsize=self.config.maxsize)

    @staticmethod
    def make_key(namespace: str, **params: Any) -> str:
        payload = json.dumps(params, sort_keys=True, ensure_ascii=False)
        return f"{namespace}|{payload}"

    async def get_or_load(
        self, key: str, loader: Callable[[], Awaitable[Any]]
    ) -> Any:
        """
        命中则直接返回；否则调用 `loader` 并缓存其结果。

        同一个键的并发加载共享同一个进行中的任务，因此只会触发一次远程请求；
        不同的键互不阻塞。loader 抛出的异常不会被缓存。
        """
        value = self.cache.get(key, _MISSING)
        if value is not _MISSING:
            return value

        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(loader())
            self._inflight[key] = future
            future.add_done_callback(lambda _f: self._inflight.pop(key, None))

        value = await asyncio.shield(future)
        self.cache[key] = value
        return value

    def clear(self) -> None:
        self._initialize_cache()
