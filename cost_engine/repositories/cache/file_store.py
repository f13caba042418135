"""On-disk cache backend: one JSON document per key."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from .base import DEFAULT_SOURCE_TAG, CacheBackendError, CacheEntry, CacheStore

logger = logging.getLogger(__name__)

SUFFIX = ".json"


class FileCacheStore(CacheStore):
    """Store each entry as ``<safe-key>-<hash>.json`` under ``directory``.

    Documents hold ``{key, data, createdAt, expiresAt, sourceTag}``. Expired
    or unreadable documents are removed when read.
    """

    backend_kind = "file"

    def __init__(
        self, directory: str | os.PathLike, clock: Optional[Callable[[], float]] = None
    ) -> None:
        super().__init__(clock)
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        safe_key = re.sub(r"[^a-zA-Z0-9_-]", "_", key)[:80]
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:10]
        return self.directory / f"{safe_key}-{digest}{SUFFIX}"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self.path_for(key)
        entry = self._read(path)
        if entry is None or entry.key != key:
            return None
        if entry.is_expired(self.now()):
            self._remove(path)
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
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(entry.to_document(), handle, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise CacheBackendError(
                self.backend_kind, f"Could not write {path}: {exc}"
            ) from exc

    def delete(self, key: str) -> None:
        self._remove(self.path_for(key))

    def purge_expired(self) -> int:
        now = self.now()
        removed = 0
        for path in self._iter_documents():
            entry = self._read(path)
            if entry is not None and entry.is_expired(now):
                self._remove(path)
                removed += 1
        return removed

    def entry_count(self) -> int:
        now = self.now()
        count = 0
        for path in self._iter_documents():
            entry = self._read(path)
            if entry is not None and not entry.is_expired(now):
                count += 1
        return count

    def _iter_documents(self):
        if not self.directory.is_dir():
            return []
        try:
            return sorted(self.directory.glob(f"*{SUFFIX}"))
        except OSError as exc:
            raise CacheBackendError(
                self.backend_kind, f"Could not list {self.directory}: {exc}"
            ) from exc

    def _read(self, path: Path) -> Optional[CacheEntry]:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError:
            logger.warning("Discarding undecodable cache document %s", path)
            self._remove(path)
            return None
        except OSError as exc:
            raise CacheBackendError(
                self.backend_kind, f"Could not read {path}: {exc}"
            ) from exc
        try:
            return CacheEntry.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.warning("Discarding corrupt cache document %s", path)
            self._remove(path)
            return None

    def _remove(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise CacheBackendError(
                self.backend_kind, f"Could not delete {path}: {exc}"
            ) from exc
