# app/services/interceptor.py

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterable

from app.errors import CacheBackendError, SerializationError
from .cache import Cache
from .cache_keys import Arg, KeyBuilder, build_key
from .outcome import Outcome, Success, is_cacheable
from .serializer import dumps, loads

logger = logging.getLogger(__name__)

FAIL_CLOSED = "fail-closed"
FAIL_OPEN = "fail-open"

Invoke = Callable[[], Awaitable[Outcome]]


class CacheAside:
    """
    Cache-aside around one handler family (one schema tag).

    For every invocation:
      1. backend disabled -> run the handler, nothing is cached;
      2. build the key from (schema, handler identity, ordered args);
      3. hit -> return the stored payload, the handler never runs;
      4. miss -> run the handler;
      5. store the result when it is a 2xx success with a non-empty payload
         and the key is still absent (at most one write per TTL window).

    The enabled flag is read on every call, so toggling the backend takes
    effect on the next request.

    Backend errors follow failure_policy: "fail-closed" propagates them to
    the caller, "fail-open" logs them and serves the request live.
    Serialization errors never fail the request; only storage is skipped.

    With single_flight=True, concurrent misses on one key share a single
    handler run instead of each executing it.
    """

    def __init__(
        self,
        cache: Cache,
        schema: str,
        ttl_seconds: int = 60,
        key_builder: KeyBuilder = build_key,
        failure_policy: str = FAIL_CLOSED,
        single_flight: bool = False,
    ):
        if failure_policy not in (FAIL_CLOSED, FAIL_OPEN):
            raise ValueError(f"unknown failure policy: {failure_policy!r}")
        self.cache = cache
        self.schema = schema
        self.ttl_seconds = ttl_seconds
        self.key_builder = key_builder
        self.failure_policy = failure_policy
        self.single_flight = single_flight
        self._inflight: Dict[str, asyncio.Future] = {}
        self._inflight_lock = asyncio.Lock()

    def build_key(self, handler_identity: str, args: Iterable[Arg]) -> str:
        return self.key_builder(self.schema, handler_identity, args)

    async def run(self, handler_identity: str, args: Iterable[Arg], invoke: Invoke) -> Outcome:
        if not self.cache.is_enabled():
            logger.debug("cache bypass (disabled): %s/%s", self.schema, handler_identity)
            return await invoke()

        args = list(args)
        key = self.build_key(handler_identity, args)
        if self.key_builder is not build_key:
            logger.debug("cache key %s <- %s", key, build_key(self.schema, handler_identity, args))

        try:
            cached = await self.cache.get(key)
        except CacheBackendError:
            if self.failure_policy == FAIL_CLOSED:
                raise
            logger.warning("cache lookup failed, serving live: %s", key, exc_info=True)
            return await invoke()

        if cached is not None:
            try:
                payload = loads(cached)
            except SerializationError:
                logger.exception("cache entry unreadable, serving live: %s", key)
            else:
                logger.debug("cache hit: %s", key)
                return Success(payload, from_cache=True)
        else:
            logger.debug("cache miss: %s", key)

        if self.single_flight:
            return await self._invoke_shared(key, invoke)
        return await self._invoke_and_store(key, invoke)

    async def _invoke_and_store(self, key: str, invoke: Invoke) -> Outcome:
        outcome = await invoke()
        await self._maybe_store(key, outcome)
        return outcome

    async def _invoke_shared(self, key: str, invoke: Invoke) -> Outcome:
        while True:
            async with self._inflight_lock:
                future = self._inflight.get(key)
                leader = future is None or future.cancelled()
                if leader:
                    future = asyncio.get_running_loop().create_future()
                    self._inflight[key] = future

            if leader:
                return await self._lead(key, invoke, future)

            logger.debug("cache miss joined in-flight call: %s", key)
            try:
                return await asyncio.shield(future)
            except asyncio.CancelledError:
                # Only the leader was cancelled: run again, possibly as the new leader.
                if not future.cancelled():
                    raise
                logger.debug("in-flight call cancelled, retrying: %s", key)

    async def _lead(self, key: str, invoke: Invoke, future: asyncio.Future) -> Outcome:
        try:
            outcome = await self._invoke_and_store(key, invoke)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as ex:
            future.set_exception(ex)
            future.exception()  # retrieved here; followers re-raise it themselves
            raise
        else:
            future.set_result(outcome)
            return outcome
        finally:
            if not future.done():
                future.cancel()
            async with self._inflight_lock:
                if self._inflight.get(key) is future:
                    del self._inflight[key]

    async def _maybe_store(self, key: str, outcome: Outcome) -> None:
        if not is_cacheable(outcome):
            logger.debug("cache store skipped (not cacheable): %s", key)
            return

        try:
            value = dumps(outcome.payload)
        except SerializationError:
            logger.exception("cache store skipped (serialization failed): %s", key)
            return

        try:
            if await self.cache.exists(key):
                logger.debug("cache store skipped (already present): %s", key)
                return
            await self.cache.set(key, value, self.ttl_seconds)
        except CacheBackendError:
            if self.failure_policy == FAIL_CLOSED:
                raise
            logger.warning("cache store failed, result served uncached: %s", key, exc_info=True)
            return
        logger.debug("cache stored: %s (ttl=%s)", key, self.ttl_seconds)
