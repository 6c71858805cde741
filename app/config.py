# app/config.py
import os
from typing import Literal, Optional

from pydantic import BaseModel, ValidationError

from app.errors import ConfigurationError


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Cache configuration:
#   CACHE_ENABLED: master switch; "false" turns every cached route into a live call
#   CACHE_BACKEND: "memory" | "redis"
#   REDIS_URL: remote target, required when CACHE_ENABLED and CACHE_BACKEND=redis
#   CACHE_TTL_SECONDS: default per-entry TTL (redis backend only)
#   CACHE_KEY_MODE: "readable" | "hashed"
#   CACHE_FAILURE_POLICY: "fail-closed" | "fail-open"
#   CACHE_SINGLE_FLIGHT: share one handler run between concurrent identical misses
CACHE_ENABLED = _env_bool("CACHE_ENABLED", "true")
CACHE_BACKEND = os.getenv("CACHE_BACKEND", "memory").lower()
REDIS_URL = os.getenv("REDIS_URL") or None
CACHE_TTL_SECONDS = os.getenv("CACHE_TTL_SECONDS", "60")  # validated by load_cache_settings
CACHE_KEY_MODE = os.getenv("CACHE_KEY_MODE", "readable").lower()
CACHE_FAILURE_POLICY = os.getenv("CACHE_FAILURE_POLICY", "fail-closed").lower()
CACHE_SINGLE_FLIGHT = _env_bool("CACHE_SINGLE_FLIGHT", "false")

# Artificial latency of the demo user handlers (seconds).
DEMO_DELAY_SECONDS = os.getenv("DEMO_DELAY_SECONDS", "3")


class CacheSettings(BaseModel):
    """Cache configuration, read once at process start."""

    enabled: bool = True
    backend: Literal["memory", "redis"] = "memory"
    redis_url: Optional[str] = None
    ttl_seconds: int = 60
    key_mode: Literal["readable", "hashed"] = "readable"
    failure_policy: Literal["fail-closed", "fail-open"] = "fail-closed"
    single_flight: bool = False

    model_config = {"frozen": True}


def load_cache_settings(**overrides) -> CacheSettings:
    """
    Build and validate CacheSettings from the environment-derived constants.
    Keyword overrides win over the environment (used by tests).

    Raises ConfigurationError when:
      - the backend, key mode or failure policy is unknown,
      - the TTL is not positive,
      - caching is enabled on the redis backend but REDIS_URL is missing.
    """
    values = {
        "enabled": CACHE_ENABLED,
        "backend": CACHE_BACKEND,
        "redis_url": REDIS_URL,
        "ttl_seconds": CACHE_TTL_SECONDS,
        "key_mode": CACHE_KEY_MODE,
        "failure_policy": CACHE_FAILURE_POLICY,
        "single_flight": CACHE_SINGLE_FLIGHT,
    }
    values.update(overrides)
    try:
        settings = CacheSettings(**values)
    except ValidationError as ex:
        raise ConfigurationError(f"invalid cache configuration: {ex}") from ex

    if settings.ttl_seconds <= 0:
        raise ConfigurationError("CACHE_TTL_SECONDS must be a positive integer")
    if settings.enabled and settings.backend == "redis" and not settings.redis_url:
        raise ConfigurationError("REDIS_URL is required when the redis cache backend is enabled")
    return settings


def demo_delay_seconds() -> float:
    try:
        delay = float(DEMO_DELAY_SECONDS)
    except ValueError:
        raise ConfigurationError(f"DEMO_DELAY_SECONDS must be a number, got {DEMO_DELAY_SECONDS!r}") from None
    if delay < 0:
        raise ConfigurationError("DEMO_DELAY_SECONDS must not be negative")
    return delay
