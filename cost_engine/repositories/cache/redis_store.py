"""Redis cache backend."""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Callable, Dict, Iterator, Optional, Union

import redis
from pydantic import ValidationError

from .base import DEFAULT_SOURCE_TAG, CacheBackendError, CacheEntry, CacheStore

logger = logging.getLogger(__name__)


def str_to_bool(value: str) -> bool:
    """Convert REDIS_SSL env variable to boolean."""
    return value.lower() in ("true", "1", "yes")


class RedisCacheStore(CacheStore):
    """Cache entries stored as JSON strings under ``key_prefix``.

    Expiry is delegated to Redis (``SET ... EX``) when ``native_expiry`` is on;
    the stored ``expiresAt`` is checked on every read either way, so servers
    without key expiry behave the same.
    """

    backend_kind = "redis"

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        password: Optional[str] = None,
        ssl: Union[str, bool] = False,
        key_prefix: str = "cost-data:",
        native_expiry: bool = True,
        client: Optional[Any] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """
        Initialize a connection to the Redis database.

        Args:
            host (str): The hostname or IP address of the Redis server.
            port (int): The port number of the Redis server (default is 6379).
            password (str): Optional password.
            ssl (str | bool): Whether to use TLS; accepts env-style strings.
            key_prefix (str): Namespace prepended to every cache key.
            native_expiry (bool): Pass the TTL to Redis as well as storing it.
            client: Pre-built client exposing the redis-py API, used instead of
                opening a connection.
        """
        super().__init__(clock)
        self.key_prefix = key_prefix
        self.native_expiry = native_expiry
        if client is not None:
            self.handler = client
            return
        ssl = str_to_bool(ssl) if isinstance(ssl, str) else ssl
        self.handler = redis.Redis(
            host=host,
            port=port,
            password=password,
            ssl=ssl,
            db=0,
            ssl_cert_reqs=None,
            decode_responses=True,
        )

    def _name(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        name = self._name(key)
        raw = self._get_name(name)
        if raw is None:
            return None
        entry = self._parse(name, raw)
        if entry is None:
            return None
        if entry.is_expired(self.now()):
            self._delete_name(name)
            return None
        return entry.data

    def set(
        self,
        key: str,
        payload: Dict[str, Any],
        ttl: float,
        source_tag: str = DEFAULT_SOURCE_TAG,
    ) -> None:
        entry = self._new_entry(key, payload, ttl, source_tag)
        name = self._name(key)
        try:
            document = json.dumps(entry.to_document())
        except (TypeError, ValueError) as exc:
            raise CacheBackendError(
                self.backend_kind, f"Payload for {name} is not JSON: {exc}"
            ) from exc
        try:
            if self.native_expiry:
                self.handler.set(name, document, ex=max(1, math.ceil(ttl)))
            else:
                self.handler.set(name, document)
        except redis.RedisError as exc:
            raise CacheBackendError(self.backend_kind, f"SET {name} failed: {exc}") from exc
        logger.debug("Saved cache entry %s (ttl=%ss)", name, ttl)

    def delete(self, key: str) -> None:
        self._delete_name(self._name(key))

    def purge_expired(self) -> int:
        now = self.now()
        removed = 0
        for name in self._iter_names():
            raw = self._get_name(name)
            if raw is None:
                continue
            entry = self._parse(name, raw)
            if entry is not None and entry.is_expired(now):
                self._delete_name(name)
                removed += 1
        return removed

    def entry_count(self) -> int:
        now = self.now()
        count = 0
        for name in self._iter_names():
            raw = self._get_name(name)
            if raw is None:
                continue
            entry = self._parse(name, raw)
            if entry is not None and not entry.is_expired(now):
                count += 1
        return count

    def close(self) -> None:
        try:
            self.handler.close()
        except redis.RedisError as exc:
            logger.warning("Error closing Redis connection: %s", exc)

    def _iter_names(self) -> Iterator[str]:
        try:
            names = list(self.handler.scan_iter(match=f"{self.key_prefix}*"))
        except redis.RedisError as exc:
            raise CacheBackendError(self.backend_kind, f"SCAN failed: {exc}") from exc
        for name in names:
            yield name.decode("utf-8") if isinstance(name, bytes) else name

    def _get_name(self, name: str) -> Optional[str]:
        try:
            return self.handler.get(name)
        except UnicodeDecodeError:
            logger.warning("Discarding undecodable cache entry %s", name)
            self._delete_name(name)
            return None
        except redis.RedisError as exc:
            raise CacheBackendError(self.backend_kind, f"GET {name} failed: {exc}") from exc

    def _delete_name(self, name: str) -> None:
        try:
            self.handler.delete(name)
        except redis.RedisError as exc:
            raise CacheBackendError(
                self.backend_kind, f"DELETE {name} failed: {exc}"
            ) from exc

    def _parse(self, name: str, raw: Union[str, bytes]) -> Optional[CacheEntry]:
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return CacheEntry.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.warning("Discarding corrupt cache entry %s", name)
            self._delete_name(name)
            return None
