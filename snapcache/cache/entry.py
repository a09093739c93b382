"""
Cache Entry Module

An Entry pairs a stored payload with the absolute instant at which it
stops being visible. Instants are integer nanoseconds since the epoch,
as returned by time.time_ns(); 0 means the entry never expires.
"""

import math
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Union

# TTL sentinels accepted by every store write operation
NO_EXPIRATION = -1  # never expires, regardless of the store's default
DEFAULT_EXPIRATION = 0  # use the store's default TTL

TTL = Union[int, float, timedelta]

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class Entry:
    """
    A stored value plus its expiration deadline.

    Attributes:
        payload: The application value (opaque to the store)
        expires_at: Deadline in nanoseconds since the epoch, 0 = never
    """
    payload: Any
    expires_at: int = 0

    def is_expired(self, now: Optional[int] = None) -> bool:
        """
        Check whether the entry is past its deadline.

        Args:
            now: Current instant in nanoseconds (default time.time_ns())

        Returns:
            False for entries that never expire, otherwise now > expires_at
        """
        if self.expires_at == 0:
            return False
        if now is None:
            now = time.time_ns()
        return now > self.expires_at


def ttl_seconds(ttl: TTL) -> float:
    """Normalize a TTL argument (seconds or timedelta) to float seconds."""
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


def expiration_deadline(ttl: TTL, default_ttl: TTL, now: Optional[int] = None) -> int:
    """
    Resolve a TTL argument to an absolute deadline.

    Args:
        ttl: NO_EXPIRATION (or any negative), DEFAULT_EXPIRATION, or a positive duration;
            infinite or NaN durations never expire
        default_ttl: Duration substituted for DEFAULT_EXPIRATION
        now: Reference instant in nanoseconds (default time.time_ns())

    Returns:
        Deadline in nanoseconds, or 0 when the entry should never expire
    """
    seconds = ttl_seconds(ttl)
    if seconds == DEFAULT_EXPIRATION:
        seconds = ttl_seconds(default_ttl)
    if seconds <= 0 or not math.isfinite(seconds):
        return 0
    if now is None:
        now = time.time_ns()
    return now + int(seconds * NANOS_PER_SECOND)
