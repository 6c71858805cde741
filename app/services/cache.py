from abc import ABC, abstractmethod
from typing import Optional


class Cache(ABC):
    """
    Minimal cache interface to enable swapping backends (memory, Redis, none) without changing callers.

    Values are opaque serialized strings. While the backend is disabled,
    get() always misses, exists() is False and set() discards the write,
    whatever the backend currently stores.
    """

    name = "cache"

    def __init__(self, enabled: bool = True):
        self._enabled = enabled

    def is_enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        """Runtime switch; takes effect on the next operation."""
        self._enabled = bool(enabled)

    async def get(self, key: str) -> Optional[str]:
        if not self.is_enabled():
            return None
        return await self._get(key)

    async def exists(self, key: str) -> bool:
        if not self.is_enabled():
            return False
        return await self._exists(key)

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        if not self.is_enabled():
            return
        await self._set(key, value, ttl_seconds)

    async def close(self) -> None:
        """Release backend resources. Default: nothing to release."""

    @abstractmethod
    async def _get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def _exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def _set(self, key: str, value: str, ttl_seconds: Optional[int]) -> None:
        ...
