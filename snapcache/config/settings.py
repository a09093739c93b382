"""
snapcache Configuration Settings

Defaults for every store created without explicit arguments. Values are
read from the environment once, at import time.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Cache configuration settings."""

    # Expiration settings (seconds)
    DEFAULT_TTL: float = float(os.environ.get("SNAPCACHE_DEFAULT_TTL", "0"))  # 0 means no expiration
    SWEEP_INTERVAL: float = float(os.environ.get("SNAPCACHE_SWEEP_INTERVAL", "60"))  # <= 0 disables the reaper

    # Persistence settings
    SNAPSHOT_PATH: str = os.environ.get("SNAPCACHE_SNAPSHOT_PATH", "snapcache.snap")

    # Logging settings
    DEBUG: bool = os.environ.get("SNAPCACHE_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("SNAPCACHE_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
