"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

from typing import Generator

import pytest

from snapcache.cache.entry import NO_EXPIRATION
from snapcache.cache.rwlock import RWLock
from snapcache.cache.store import KVStore


# ============================================================================
# KVStore Fixtures
# ============================================================================

@pytest.fixture
def store() -> Generator[KVStore, None, None]:
    """Create a fresh KVStore with no default TTL and no reaper thread."""
    s = KVStore(default_ttl=NO_EXPIRATION, sweep_interval=0)
    yield s
    s.close()


@pytest.fixture
def ttl_store() -> Generator[KVStore, None, None]:
    """Create a KVStore whose default TTL is one hour."""
    s = KVStore(default_ttl=3600, sweep_interval=0)
    yield s
    s.close()


@pytest.fixture
def reaped_store() -> Generator[KVStore, None, None]:
    """Create a KVStore with a fast-running reaper (50ms)."""
    s = KVStore(default_ttl=NO_EXPIRATION, sweep_interval=0.05)
    yield s
    s.close()


# ============================================================================
# Persistence Fixtures
# ============================================================================

@pytest.fixture
def snapshot_path(tmp_path) -> str:
    """Path for a snapshot file inside the test's temp directory."""
    return str(tmp_path / "cache.snap")


# ============================================================================
# Lock Fixtures
# ============================================================================

@pytest.fixture
def rwlock() -> RWLock:
    """Create a fresh reader/writer lock."""
    return RWLock()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
