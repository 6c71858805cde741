# app/main.py

from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.config import load_cache_settings
from app.errors import CacheBackendError
from app.routers import cache_admin, test
from app.services.cache_backends import RedisCache
from app.services.cache_factory import create_cache

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: validate configuration (ConfigurationError aborts startup), build the shared cache
    settings = load_cache_settings()
    app.state.cache_settings = settings
    app.state.cache = create_cache(settings)
    app.state.cache_interceptors = {}
    logger.info(
        "Response cache ready (backend=%s, enabled=%s, ttl=%s sec, keys=%s, policy=%s)",
        app.state.cache.name,
        app.state.cache.is_enabled(),
        settings.ttl_seconds,
        settings.key_mode,
        settings.failure_policy,
    )
    try:
        yield
    finally:
        # Shutdown: release the remote connection pool
        await app.state.cache.close()

app = FastAPI(lifespan=lifespan)
app.include_router(test.router)
app.include_router(cache_admin.router)


@app.exception_handler(CacheBackendError)
async def cache_backend_error_handler(request: Request, exc: CacheBackendError):
    logger.error("cache backend unavailable on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Cache backend unavailable"})


@app.get("/health")
async def health_check(request: Request):
    cache = request.app.state.cache
    if not cache.is_enabled():
        return {"status": "ok", "cache": "disabled", "backend": cache.name}
    try:
        if isinstance(cache, RedisCache):
            await cache.ping()
        return {"status": "ok", "cache": "enabled", "backend": cache.name}
    except CacheBackendError as e:
        return {"status": "error", "cache": str(e)}
