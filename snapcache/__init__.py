"""
snapcache: In-Process Key-Value Cache

A thread-safe, in-memory key-value cache with per-entry expiration,
a background reaper thread, and binary snapshot persistence.
"""

from .cache.entry import DEFAULT_EXPIRATION, NO_EXPIRATION, Entry
from .cache.store import KVStore
from .errors import (
    AlreadyExistsError,
    CacheError,
    DeserializationError,
    NotFoundError,
    SerializationError,
)
from .persistence.snapshot import Snapshotter

__version__ = "1.0.0"

__all__ = [
    "KVStore",
    "Entry",
    "Snapshotter",
    "NO_EXPIRATION",
    "DEFAULT_EXPIRATION",
    "CacheError",
    "AlreadyExistsError",
    "NotFoundError",
    "SerializationError",
    "DeserializationError",
]
