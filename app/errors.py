# app/errors.py


class CacheError(Exception):
    """Base class for every error raised by the caching layer."""


class ConfigurationError(CacheError):
    """Invalid or incomplete cache configuration. Fatal at startup."""


class CacheBackendError(CacheError):
    """The remote store could not be reached or rejected a command."""


class DuplicateKeyError(CacheError):
    """
    A write hit a key that is already stored in the local map.
    Only possible when a caller skips the exists-before-set check.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"cache key already present: {key}")


class SerializationError(CacheError):
    """A payload could not be converted to or from its stored text form."""
