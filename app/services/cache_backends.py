import logging
from typing import List, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from app.errors import CacheBackendError
from .cache import Cache
from .local_store import LocalMapStore

logger = logging.getLogger(__name__)


class LocalMapCache(Cache):
    """In-process map backend. No expiration: ttl_seconds is accepted and ignored."""

    name = "memory"

    def __init__(self, enabled: bool = True, store: Optional[LocalMapStore] = None):
        super().__init__(enabled)
        self._store = store if store is not None else LocalMapStore()

    async def _get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    async def _exists(self, key: str) -> bool:
        return self._store.contains(key)

    async def _set(self, key: str, value: str, ttl_seconds: Optional[int]) -> None:
        self._store.insert(key, value)

    def keys(self) -> List[str]:
        return self._store.keys()

    def __len__(self) -> int:
        return len(self._store)


class RedisCache(Cache):
    """
    Shared cache backed by Redis; the store enforces per-entry expiration.

    The client is created once here (redis-py opens connections lazily on
    the first command). A backend constructed disabled never creates a
    client, so every operation stays inert even if re-enabled later.
    Redis failures are not retried: they surface as CacheBackendError.
    """

    name = "redis"

    def __init__(self, url: Optional[str], enabled: bool = True, default_ttl_seconds: int = 60, client=None):
        super().__init__(enabled)
        self._url = url
        self._default_ttl = default_ttl_seconds
        self._redis = None
        if enabled:
            self._redis = client if client is not None else aioredis.Redis.from_url(url, decode_responses=True)
            logger.info("redis cache configured (default_ttl=%s sec)", default_ttl_seconds)

    def is_enabled(self) -> bool:
        return self._redis is not None and super().is_enabled()

    async def _get(self, key: str) -> Optional[str]:
        try:
            return await self._redis.get(key)
        except RedisError as ex:
            raise CacheBackendError(f"redis GET failed for {key!r}: {ex}") from ex

    async def _exists(self, key: str) -> bool:
        try:
            return bool(await self._redis.exists(key))
        except RedisError as ex:
            raise CacheBackendError(f"redis EXISTS failed for {key!r}: {ex}") from ex

    async def _set(self, key: str, value: str, ttl_seconds: Optional[int]) -> None:
        try:
            await self._redis.set(key, value, ex=ttl_seconds or self._default_ttl)
        except RedisError as ex:
            raise CacheBackendError(f"redis SET failed for {key!r}: {ex}") from ex

    async def ping(self) -> bool:
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except RedisError as ex:
            raise CacheBackendError(f"redis PING failed: {ex}") from ex

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()


class NoCache(Cache):
    """No-op cache used when caching is disabled by configuration."""

    name = "none"

    def __init__(self):
        super().__init__(enabled=False)

    def is_enabled(self) -> bool:
        return False

    async def _get(self, key: str): return None
    async def _exists(self, key: str): return False
    async def _set(self, key: str, value: str, ttl_seconds: Optional[int]): pass
