"""Cache module for snapcache."""

from .entry import DEFAULT_EXPIRATION, NO_EXPIRATION, Entry
from .reaper import Reaper
from .rwlock import RWLock
from .store import KVStore

__all__ = ["KVStore", "Entry", "Reaper", "RWLock", "NO_EXPIRATION", "DEFAULT_EXPIRATION"]
