"""JSON file cache of resolved embed locators."""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from embedengine.clock import as_utc
from embedengine.exceptions import StorageError
from embedengine.logger import get_logger
from embedengine.models import CacheEntry

log = get_logger(__name__)

DEFAULT_TTL = timedelta(hours=1)


class CorruptCachePolicy(str, Enum):
    """What to do with a cache file that exists but cannot be parsed."""

    RAISE = "raise"
    RESET = "reset"


class CacheStore:
    """Maps source URLs to their last successful resolution.

    The whole file is read on every lookup and rewritten on every ``put``.
    A missing file is an empty store. A corrupt file raises
    :class:`StorageError` unless the store was created with
    ``CorruptCachePolicy.RESET``, in which case it is treated as empty and
    replaced by the next write.

    File access is synchronous and runs on the caller's event loop, which
    is fine for the small, single-process stores this is meant for.
    """

    def __init__(
        self,
        path: str | Path,
        ttl: timedelta = DEFAULT_TTL,
        corrupt_policy: CorruptCachePolicy = CorruptCachePolicy.RAISE,
    ) -> None:
        self.path = Path(path)
        self.ttl = ttl
        self.corrupt_policy = CorruptCachePolicy(corrupt_policy)

    def get(self, source_url: str) -> CacheEntry | None:
        """Return the entry for ``source_url``, or None if there is none."""
        return self._load().get(source_url)

    def entries(self) -> dict[str, CacheEntry]:
        """Return a snapshot of every entry in the store."""
        return self._load()

    def is_fresh(
        self,
        entry: CacheEntry,
        now: datetime,
        ttl: timedelta | None = None,
    ) -> bool:
        """True while ``now`` is less than ``ttl`` past the entry's stamp."""
        ttl = self.ttl if ttl is None else ttl
        return as_utc(now) - entry.resolved_at < ttl

    def put(self, source_url: str, resolved_url: str, now: datetime) -> CacheEntry:
        """Upsert an entry stamped with ``now`` and persist the whole store."""
        now = as_utc(now)
        entries = self._load()
        previous = entries.get(source_url)
        stamp = now
        if previous is not None and previous.resolved_at > now:
            # resolved_at never moves backwards for a key
            stamp = previous.resolved_at

        entry = CacheEntry(
            source_url=source_url,
            resolved_url=resolved_url,
            resolved_at=stamp,
        )
        entries[source_url] = entry
        self._save(entries)
        log.info(
            "cache_entry_saved",
            source_url=source_url,
            resolved_at=entry.resolved_at.isoformat(),
        )
        return entry

    # --- Private helpers ---

    def _load(self) -> dict[str, CacheEntry]:
        """Read and validate the full cache file."""
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(str(self.path), f"Cannot read cache: {exc}") from exc

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("top-level value is not an object")
            return {
                key: CacheEntry.model_validate({**record, "source_url": key})
                for key, record in data.items()
            }
        except (ValueError, TypeError, ValidationError) as exc:
            if self.corrupt_policy is CorruptCachePolicy.RESET:
                log.warning("cache_corrupt_reset", path=str(self.path), error=str(exc))
                return {}
            raise StorageError(str(self.path), f"Corrupt cache file: {exc}") from exc

    def _save(self, entries: dict[str, CacheEntry]) -> None:
        """Rewrite the cache file atomically."""
        payload: dict[str, Any] = {
            key: entry.model_dump(mode="json", by_alias=True)
            for key, entry in entries.items()
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(str(self.path), f"Cannot write cache: {exc}") from exc
