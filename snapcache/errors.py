"""
Exception hierarchy for snapcache.

All errors raised by the store derive from CacheError so callers can
catch them in one place. File-level failures in the snapshot helpers are
not wrapped: they surface as the built-in OSError raised by open().
"""


class CacheError(Exception):
    """Base class for all snapcache errors."""


class AlreadyExistsError(CacheError):
    """Raised by add() when the key holds an unexpired entry."""

    def __init__(self, key: str):
        super().__init__(f"item {key!r} already exists")
        self.key = key


class NotFoundError(CacheError):
    """Raised by replace() when the key holds no unexpired entry."""

    def __init__(self, key: str):
        super().__init__(f"item {key!r} doesn't exist")
        self.key = key


class SerializationError(CacheError):
    """A payload could not be encoded, or the snapshot could not be written."""


class DeserializationError(CacheError):
    """Snapshot data was malformed, truncated or of an unknown format."""
