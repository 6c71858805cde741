import logging

from fastapi import Request

from app.config import CacheSettings
from .cache import Cache
from .cache_backends import LocalMapCache, NoCache, RedisCache

logger = logging.getLogger(__name__)


def create_cache(settings: CacheSettings) -> Cache:
    """
    Build the process-wide cache instance from configuration:
      - disabled -> no-op backend (always misses)
      - "memory" -> in-process map (single instance, no expiration)
      - "redis"  -> shared cache with per-entry TTL

    Called once at startup; the instance is owned by the application
    (app.state.cache) and handed to every cached route by reference.
    """
    if not settings.enabled:
        logger.info("cache disabled by configuration")
        return NoCache()

    if settings.backend == "redis":
        return RedisCache(settings.redis_url, enabled=True, default_ttl_seconds=settings.ttl_seconds)

    return LocalMapCache(enabled=True)


def get_cache(request: Request) -> Cache:
    """FastAPI dependency returning the application's cache instance."""
    return request.app.state.cache
