"""
Key-Value Store Module

This module implements the core key-value storage functionality:
- Basic operations (set, get, add, replace, delete)
- TTL (Time-To-Live) support with lazy and periodic expiration
- Snapshot persistence through a bound Snapshotter

Every public method takes the store's reader/writer lock exactly once.
Composite operations (add, replace) run their check-then-act sequence
through the lock-free helpers _get and _set inside one critical section.
"""

import logging
import time
from typing import Any, BinaryIO, Callable, Dict, Optional, Tuple

from ..config.settings import settings
from ..errors import AlreadyExistsError, NotFoundError
from ..persistence.snapshot import Snapshotter
from .entry import DEFAULT_EXPIRATION, TTL, Entry, expiration_deadline, ttl_seconds
from .reaper import Reaper
from .rwlock import RWLock

logger = logging.getLogger(__name__)


class KVStore:
    """
    Thread-safe in-memory key-value store with per-entry expiration.

    Values may be any Python object; only snapshotting restricts payloads
    to the types the snapshot codec understands.

    TTL arguments:
        NO_EXPIRATION (-1): the entry never expires
        DEFAULT_EXPIRATION (0): the store's default_ttl applies
        positive seconds (or timedelta): expires that long after the call

    Internal Storage:
        Plain dict of key -> Entry, replaced wholesale by flush().
        Expired entries stay in the dict until delete_expired() (run
        periodically by the reaper) or an overwrite removes them.

    Attributes:
        default_ttl: Seconds applied for DEFAULT_EXPIRATION (<= 0 = never)
        sweep_interval: Seconds between reaper sweeps (<= 0 = no reaper)
        snapshotter: Snapshotter bound to this store
    """

    def __init__(self, default_ttl: Optional[TTL] = None, sweep_interval: Optional[TTL] = None):
        """
        Initialize the store and start its reaper.

        Args:
            default_ttl: Default time-to-live (default from settings.DEFAULT_TTL)
            sweep_interval: Reaper period (default from settings.SWEEP_INTERVAL)
        """
        self.default_ttl = ttl_seconds(default_ttl if default_ttl is not None else settings.DEFAULT_TTL)
        self.sweep_interval = ttl_seconds(
            sweep_interval if sweep_interval is not None else settings.SWEEP_INTERVAL
        )

        self._entries: Dict[str, Entry] = {}
        self._lock = RWLock()
        self.snapshotter = Snapshotter(self)

        self._reaper = Reaper(self.delete_expired, self.sweep_interval)
        if self.sweep_interval > 0:
            self._reaper.start()

    # ------------------------------------------------------------------
    # Lock-free helpers (caller must hold the lock)
    # ------------------------------------------------------------------

    def _get(self, key: str) -> Tuple[Any, bool]:
        entry = self._entries.get(key)
        if entry is None or entry.is_expired():
            return None, False
        return entry.payload, True

    def _set(self, key: str, value: Any, ttl: TTL) -> None:
        self._entries[key] = Entry(value, expiration_deadline(ttl, self.default_ttl))

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any, ttl: TTL = DEFAULT_EXPIRATION) -> None:
        """
        Insert or overwrite a key unconditionally.

        Args:
            key: The key to store
            value: The value to associate with the key
            ttl: NO_EXPIRATION, DEFAULT_EXPIRATION or a positive duration
        """
        entry = Entry(value, expiration_deadline(ttl, self.default_ttl))
        with self._lock.write_locked():
            self._entries[key] = entry

    def get(self, key: str) -> Tuple[Any, bool]:
        """
        Retrieve the value for a given key.

        Expired entries are reported as missing but are not removed here.

        Args:
            key: The key to look up

        Returns:
            (value, True) if present and unexpired, (None, False) otherwise
        """
        with self._lock.read_locked():
            return self._get(key)

    def add(self, key: str, value: Any, ttl: TTL = DEFAULT_EXPIRATION) -> None:
        """
        Store a key only if it has no unexpired entry.

        Raises:
            AlreadyExistsError: If an unexpired entry exists for key
        """
        with self._lock.write_locked():
            _, found = self._get(key)
            if found:
                raise AlreadyExistsError(key)
            self._set(key, value, ttl)

    def replace(self, key: str, value: Any, ttl: TTL = DEFAULT_EXPIRATION) -> None:
        """
        Overwrite a key only if it has an unexpired entry.

        Raises:
            NotFoundError: If no unexpired entry exists for key
        """
        with self._lock.write_locked():
            _, found = self._get(key)
            if not found:
                raise NotFoundError(key)
            self._set(key, value, ttl)

    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        with self._lock.write_locked():
            self._entries.pop(key, None)

    def exists(self, key: str) -> bool:
        """Check if a key holds an unexpired entry."""
        with self._lock.read_locked():
            return self._get(key)[1]

    def delete_expired(self) -> int:
        """
        Remove all expired entries from the store (active expiration).

        Called periodically by the reaper; safe to call directly.

        Returns:
            Number of entries removed
        """
        now = time.time_ns()
        with self._lock.write_locked():
            expired = [k for k, e in self._entries.items() if e.expires_at > 0 and now > e.expires_at]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired entries")
        return len(expired)

    def count(self) -> int:
        """
        Get the current number of entries in the store.

        Note: This includes expired entries that haven't been swept yet.
        """
        with self._lock.read_locked():
            return len(self._entries)

    def flush(self) -> None:
        """Remove all entries from the store."""
        with self._lock.write_locked():
            self._entries = {}

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Entries stored, expired or not
            - expired_keys: Expired entries awaiting a sweep
            - active_keys: Unexpired entries
            - default_ttl: Default TTL in seconds
            - sweep_interval: Reaper period in seconds
            - reaper_running: Whether the reaper thread is alive
        """
        now = time.time_ns()
        with self._lock.read_locked():
            total = len(self._entries)
            expired = sum(1 for e in self._entries.values() if e.is_expired(now))

        return {
            "total_keys": total,
            "expired_keys": expired,
            "active_keys": total - expired,
            "default_ttl": self.default_ttl,
            "sweep_interval": self.sweep_interval,
            "reaper_running": self._reaper.is_running,
        }

    # ------------------------------------------------------------------
    # Snapshot support
    # ------------------------------------------------------------------

    def _encode_entries(self, encode: Callable[[Dict[str, Entry]], bytes]) -> bytes:
        """Run encode over the entry map while holding the read lock."""
        with self._lock.read_locked():
            return encode(self._entries)

    def _merge_unexpired(self, entries: Dict[str, Entry]) -> int:
        """
        Overwrite existing, unexpired keys with the given entries.

        Keys that are absent or expired in this store are skipped.

        Returns:
            Number of entries overwritten
        """
        merged = 0
        with self._lock.write_locked():
            now = time.time_ns()
            for key, entry in entries.items():
                current = self._entries.get(key)
                if current is not None and not current.is_expired(now):
                    self._entries[key] = entry
                    merged += 1
        return merged

    def save(self, stream: BinaryIO) -> None:
        """Write a snapshot of all entries to a binary stream."""
        self.snapshotter.save(stream)

    def load(self, stream: BinaryIO) -> int:
        """Merge a snapshot from a binary stream. See Snapshotter.load."""
        return self.snapshotter.load(stream)

    def save_to_file(self, path: Optional[str] = None) -> None:
        """Write a snapshot to path (default settings.SNAPSHOT_PATH)."""
        self.snapshotter.save_to_file(path)

    def load_from_file(self, path: Optional[str] = None) -> int:
        """Merge a snapshot from path (default settings.SNAPSHOT_PATH)."""
        return self.snapshotter.load_from_file(path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def stop_reaper(self, timeout: Optional[float] = None) -> None:
        """Stop the background reaper. Safe to call more than once."""
        self._reaper.stop(timeout)

    close = stop_reaper

    def __enter__(self) -> "KVStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop_reaper()

