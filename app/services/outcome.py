# app/services/outcome.py
from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass
class Success:
    payload: Any
    status_code: int = 200
    from_cache: bool = False
    # Handler's own return value (e.g. a Response) when it is not the payload itself.
    response: Any = None
    # False when a hit could not reproduce the live response (status, headers).
    cacheable: bool = True


@dataclass
class Failure:
    status_code: int
    detail: Any = None
    # Exception raised by the handler, re-raised by the HTTP adapter once caching is done.
    error: Optional[BaseException] = None
    response: Any = None


Outcome = Union[Success, Failure]


def is_empty_payload(payload: Any) -> bool:
    if payload is None:
        return True
    if isinstance(payload, (str, bytes, list, tuple, dict, set)):
        return len(payload) == 0
    return False


def is_cacheable(outcome: Outcome) -> bool:
    """Only 2xx successes carrying a non-empty payload may be stored."""
    return (
        isinstance(outcome, Success)
        and outcome.cacheable
        and 200 <= outcome.status_code < 300
        and not is_empty_payload(outcome.payload)
    )
