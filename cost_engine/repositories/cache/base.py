"""Cache store contract shared by every backend."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_SOURCE_TAG = "cost-aggregator"


class CacheBackendError(RuntimeError):
    """Raised when the underlying storage of a cache backend fails."""

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(message)
        self.backend = backend
        self.message = message


class CacheEntry(BaseModel):
    """Stored document: the payload plus its timestamps (epoch seconds)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key: str
    data: Dict[str, Any]
    created_at: float = Field(..., alias="createdAt")
    expires_at: float = Field(..., alias="expiresAt")
    source_tag: str = Field(DEFAULT_SOURCE_TAG, alias="sourceTag")

    @model_validator(mode="after")
    def _check_expiry(self) -> "CacheEntry":
        if self.expires_at <= self.created_at:
            raise ValueError("expiresAt must be later than createdAt")
        return self

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class CacheStats(BaseModel):
    """Entry count and kind of a cache backend."""

    entry_count: int
    backend_kind: str


class CacheStore(ABC):
    """Key/value store with per-entry expiry.

    Expired entries are absent: ``get`` never returns them. ``set`` replaces
    the whole entry.
    """

    backend_kind: str

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.time

    def now(self) -> float:
        return self._clock()

    def _new_entry(
        self, key: str, payload: Dict[str, Any], ttl: float, source_tag: str
    ) -> CacheEntry:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        created_at = self.now()
        return CacheEntry(
            key=key,
            data=payload,
            created_at=created_at,
            expires_at=created_at + ttl,
            source_tag=source_tag,
        )

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the payload for ``key`` or None when absent or expired."""
        raise NotImplementedError

    @abstractmethod
    def set(
        self,
        key: str,
        payload: Dict[str, Any],
        ttl: float,
        source_tag: str = DEFAULT_SOURCE_TAG,
    ) -> None:
        """Store ``payload`` under ``key`` for ``ttl`` seconds."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def purge_expired(self) -> int:
        """Remove expired entries; return how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def entry_count(self) -> int:
        raise NotImplementedError

    def stats(self) -> CacheStats:
        return CacheStats(entry_count=self.entry_count(), backend_kind=self.backend_kind)

    def close(self) -> None:
        """Release backend resources."""
