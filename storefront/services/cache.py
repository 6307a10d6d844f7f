"""Response cache for expensive read queries.

Two backends share one async interface: an in-process dict with per-entry
expiry, and Redis (values stored as JSON with ``ex=`` expiry). Keys are
prefixed with a namespace so several deployments can share one Redis.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from redis.asyncio import Redis

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


class ResponseCache:
    """In-memory TTL cache.

    Entries are ``(expires_at, value)`` tuples; expiry is checked lazily on
    read. ``clock`` is injectable so tests can move time forward.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        namespace: str = "storefront",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace
        self._clock = clock
        self._data: Dict[str, Tuple[float, Any]] = {}

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        k = self._key(key)
        entry = self._data.get(k)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._data.pop(k, None)
            return None
        return value

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._data[self._key(key)] = (self._clock() + ttl, value)

    async def close(self) -> None:
        self._data.clear()


class RedisResponseCache:
    """Redis-backed cache with the same interface as :class:`ResponseCache`."""

    def __init__(self, client, ttl_seconds: int = DEFAULT_TTL_SECONDS, namespace: str = "storefront"):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisResponseCache":
        return cls(Redis.from_url(url, decode_responses=True), **kwargs)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        raw = await self.client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        await self.client.set(self._key(key), json.dumps(value), ex=ttl)

    async def close(self) -> None:
        await self.client.aclose()


def build_cache(settings):
    if settings.cache_backend == "redis":
        logger.info("Using Redis response cache at %s", settings.redis_url)
        return RedisResponseCache.from_url(
            settings.redis_url,
            ttl_seconds=settings.cache_ttl_seconds,
            namespace=settings.cache_namespace,
        )
    if settings.cache_backend != "memory":
        raise RuntimeError(f"Unknown CACHE_BACKEND {settings.cache_backend!r}")
    return ResponseCache(
        ttl_seconds=settings.cache_ttl_seconds,
        namespace=settings.cache_namespace,
    )
