# app/routers/cache_admin.py

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.services.cache import Cache
from app.services.cache_factory import get_cache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cache", tags=["cache"])


class CacheSwitch(BaseModel):
    enabled: bool


@router.get("")
def cache_status(cache: Cache = Depends(get_cache)):
    return {"enabled": cache.is_enabled(), "backend": cache.name}


@router.put("/enabled")
def set_cache_enabled(body: CacheSwitch, cache: Cache = Depends(get_cache)):
    """
    PUT /cache/enabled
    Runtime switch for the response cache. Applies from the next request on;
    entries already stored are kept and served again once re-enabled.
    """
    cache.set_enabled(body.enabled)
    logger.info("cache %s at runtime (backend=%s)", "enabled" if cache.is_enabled() else "disabled", cache.name)
    return {"enabled": cache.is_enabled(), "backend": cache.name}
