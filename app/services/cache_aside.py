# app/services/cache_aside.py

import functools
import inspect
import json
import logging
from typing import Annotated, Any, Callable, List, Optional, get_args, get_origin

from fastapi import BackgroundTasks, HTTPException, Request, Response
from fastapi.params import Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .cache_keys import Arg, get_key_builder
from .interceptor import CacheAside
from .outcome import Failure, Outcome, Success

logger = logging.getLogger(__name__)

_INJECTED_TYPES = (Request, Response, BackgroundTasks)
_REQUEST_PARAM = "_cache_aside_request"


def _is_injected(param: inspect.Parameter) -> bool:
    """Framework-provided parameters are not part of the handler's arguments."""
    annotation = param.annotation
    if isinstance(param.default, Depends):
        return True
    if get_origin(annotation) is Annotated:
        if any(isinstance(meta, Depends) for meta in get_args(annotation)[1:]):
            return True
        annotation = get_args(annotation)[0]
    return inspect.isclass(annotation) and issubclass(annotation, _INJECTED_TYPES)


_DEFAULT_RESPONSE_HEADERS = {"content-length", "content-type"}


def _replayable(result: JSONResponse) -> bool:
    """A hit answers 200 with the bare payload, so only such responses may be stored."""
    return (
        result.status_code == 200
        and result.background is None
        and {name.lower() for name in result.headers.keys()} <= _DEFAULT_RESPONSE_HEADERS
    )


def _to_outcome(result: Any) -> Outcome:
    if not isinstance(result, Response):
        return Success(result)
    status = result.status_code
    if 200 <= status < 300 and isinstance(result, JSONResponse):
        return Success(json.loads(result.body), status_code=status, response=result, cacheable=_replayable(result))
    return Failure(status, response=result)


def _interceptor_for(request: Request, schema: str, ttl_seconds: Optional[int]) -> CacheAside:
    """One interceptor per (schema, ttl), rebuilt when app.state swaps the cache or its settings."""
    state = request.app.state
    registry = getattr(state, "cache_interceptors", None)
    if registry is None:
        registry = state.cache_interceptors = {}
    settings = state.cache_settings
    ttl_seconds = ttl_seconds or settings.ttl_seconds
    entry = registry.get((schema, ttl_seconds))
    if entry is not None and entry[0] is settings and entry[1].cache is state.cache:
        return entry[1]
    interceptor = CacheAside(
        state.cache,
        schema,
        ttl_seconds=ttl_seconds,
        key_builder=get_key_builder(settings.key_mode),
        failure_policy=settings.failure_policy,
        single_flight=settings.single_flight,
    )
    registry[(schema, ttl_seconds)] = (settings, interceptor)
    return interceptor


def cache_aside(schema: str, ttl_seconds: Optional[int] = None, identity: Optional[str] = None) -> Callable:
    """
    Mark a FastAPI endpoint as cacheable.

        @router.get("/{uuid}")
        @cache_aside("test-by-id", identity="Test.Get")
        async def get(uuid: UUID): ...

    The cache key is built from the schema tag, the handler identity
    (default "<module>.<function>") and the endpoint's resolved arguments in
    declaration order. Injected parameters (Request, Response,
    BackgroundTasks, Depends(...)) are left out of the key.

    A hit returns the stored JSON payload without calling the endpoint.
    Only a plain 200 JSONResponse is stored when the endpoint returns a
    Response; other statuses or extra headers would be lost on a hit.
    An HTTPException raised by the endpoint is never cached and is re-raised.
    """
    def decorator(func: Callable) -> Callable:
        handler_identity = identity or f"{func.__module__.rsplit('.', 1)[-1]}.{func.__name__}"
        signature = inspect.signature(func)
        key_params: List[str] = [name for name, p in signature.parameters.items() if not _is_injected(p)]

        request_param = next(
            (name for name, p in signature.parameters.items()
             if inspect.isclass(p.annotation) and issubclass(p.annotation, Request)),
            None,
        )
        params = list(signature.parameters.values())
        if request_param is None:
            extra = inspect.Parameter(_REQUEST_PARAM, inspect.Parameter.KEYWORD_ONLY, annotation=Request)
            tail = [p for p in params if p.kind == inspect.Parameter.VAR_KEYWORD]
            params = [p for p in params if p.kind != inspect.Parameter.VAR_KEYWORD] + [extra] + tail

        @functools.wraps(func)
        async def wrapper(**kwargs):
            request: Request = kwargs[request_param] if request_param else kwargs.pop(_REQUEST_PARAM)
            args: List[Arg] = [(name, kwargs.get(name)) for name in key_params]

            async def invoke() -> Outcome:
                try:
                    if inspect.iscoroutinefunction(func):
                        result = await func(**kwargs)
                    else:
                        result = await run_in_threadpool(func, **kwargs)
                except HTTPException as ex:
                    return Failure(ex.status_code, ex.detail, error=ex)
                return _to_outcome(result)

            interceptor = _interceptor_for(request, schema, ttl_seconds)
            outcome = await interceptor.run(handler_identity, args, invoke)

            if isinstance(outcome, Failure):
                if outcome.error is not None:
                    raise outcome.error
                return outcome.response
            if outcome.response is not None:
                return outcome.response
            return outcome.payload

        wrapper.__signature__ = signature.replace(parameters=params)
        wrapper.cache_schema = schema
        wrapper.cache_identity = handler_identity
        return wrapper

    return decorator
