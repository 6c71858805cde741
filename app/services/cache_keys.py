# app/services/cache_keys.py
import hashlib
from typing import Any, Callable, Iterable, Tuple

from app.errors import ConfigurationError

KEY_DELIMITER = "-"
EMPTY_VALUE = ""

Arg = Tuple[str, Any]
KeyBuilder = Callable[[str, str, Iterable[Arg]], str]


def format_arg(value: Any) -> str:
    """String form of one argument value; None becomes the explicit empty marker."""
    if value is None:
        return EMPTY_VALUE
    return str(value)


def build_key(schema: str, handler_identity: str, args: Iterable[Arg]) -> str:
    """
    Readable key: schema-handler-name1-value1-name2-value2...

    Arguments keep their declaration order and absent values are kept with
    an empty value. The delimiter is not escaped inside values, so two
    argument sets can collide when a value contains "-"; use
    build_hashed_key where that matters.
    """
    params = KEY_DELIMITER.join(f"{name}{KEY_DELIMITER}{format_arg(value)}" for name, value in args)
    return f"{schema}{KEY_DELIMITER}{handler_identity}{KEY_DELIMITER}{params}"


def build_hashed_key(schema: str, handler_identity: str, args: Iterable[Arg]) -> str:
    """
    Collision-proof key: schema-handler-<sha256>. Every name and value is
    length-prefixed before hashing, so no value can spill into its neighbour.
    """
    digest = hashlib.sha256()
    for name, value in args:
        for part in (name, format_arg(value)):
            raw = part.encode("utf-8")
            digest.update(f"{len(raw)}:".encode("ascii"))
            digest.update(raw)
    return f"{schema}{KEY_DELIMITER}{handler_identity}{KEY_DELIMITER}{digest.hexdigest()}"


_BUILDERS = {
    "readable": build_key,
    "hashed": build_hashed_key,
}


def get_key_builder(mode: str) -> KeyBuilder:
    try:
        return _BUILDERS[mode]
    except KeyError:
        raise ConfigurationError(f"unknown cache key mode: {mode!r}") from None
