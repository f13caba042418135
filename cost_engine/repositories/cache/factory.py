"""Build the cache store selected by configuration."""

from __future__ import annotations

from typing import Optional

from cost_engine.configs import Settings, settings as default_settings

from .base import CacheStore
from .file_store import FileCacheStore
from .memory_store import MemoryCacheStore
from .redis_store import RedisCacheStore


def create_cache_store(config: Optional[Settings] = None) -> CacheStore:
    """Return a cache store for ``config.CACHE_BACKEND``."""
    config = config or default_settings
    if config.CACHE_BACKEND == "memory":
        return MemoryCacheStore(max_entries=config.CACHE_MAX_ENTRIES)
    if config.CACHE_BACKEND == "file":
        return FileCacheStore(config.CACHE_FILE_PATH)
    if config.CACHE_BACKEND == "redis":
        return RedisCacheStore(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD,
            ssl=config.REDIS_SSL,
            key_prefix=config.REDIS_KEY_PREFIX,
        )
    raise ValueError(f"Unknown cache backend: {config.CACHE_BACKEND}")
