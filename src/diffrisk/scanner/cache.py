"""Per-key analysis cache: one JSON file per evaluation key.

Entries are never locked across processes.  Anything unreadable, from an
older cache version, or past its maximum age counts as a miss and is
deleted, so a corrupted cache heals itself on the next run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from diffrisk.constants.cache import (
    CACHE_ENTRY_SUFFIX,
    CACHE_TEMP_PREFIX,
    CACHE_TEMP_SUFFIX,
    CACHE_VERSION,
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_MAX_AGE_HOURS,
    DEFAULT_CACHE_MAX_ENTRIES,
)
from diffrisk.io import load_json_file, write_json_atomic
from diffrisk.scanner.determinism import short_hash
from diffrisk.types import CacheEntryPayload, CacheKeyComponents, CacheStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheSettings:
    enabled: bool = True
    dir: str = DEFAULT_CACHE_DIR
    max_age_hours: float = DEFAULT_CACHE_MAX_AGE_HOURS
    max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    version: int = CACHE_VERSION


def build_cache_key(components: CacheKeyComponents) -> str:
    """Short hash of the pipe-joined key components, in fixed order."""
    parts = [
        components["repo_path"],
        components["head_sha"],
        components["base"],
        components["scope"],
        components["tool_version"],
        components["config_hash"],
        components["diff_hash"] or "",
        components["suppressions_hash"] or "",
    ]
    return short_hash("|".join(parts))


class AnalysisCache:
    """File-backed cache of evaluation reports."""

    def __init__(self, root: Path, settings: CacheSettings | None = None) -> None:
        self.settings = settings or CacheSettings()
        cache_dir = Path(self.settings.dir)
        self.directory = cache_dir if cache_dir.is_absolute() else root / cache_dir
        self.hits = 0
        self.misses = 0

    def _entry_path(self, key: str) -> Path:
        return self.directory / f"{key}{CACHE_ENTRY_SUFFIX}"

    def _discard(self, path: Path, reason: str) -> None:
        logger.warning("Discarding cache entry %s: %s", path.name, reason)
        path.unlink(missing_ok=True)

    def get(self, key: str, *, now: datetime | None = None) -> Any | None:
        """Return cached data for ``key`` or None on a miss."""
        if not self.settings.enabled:
            return None
        path = self._entry_path(key)
        if not path.is_file():
            self.misses += 1
            return None

        try:
            payload = load_json_file(path)
        except (OSError, ValueError) as exc:
            self._discard(path, f"unreadable ({exc})")
            self.misses += 1
            return None

        if not isinstance(payload, dict) or payload.get("key") != key or "data" not in payload:
            self._discard(path, "malformed entry")
            self.misses += 1
            return None
        if payload.get("version") != self.settings.version:
            self._discard(path, f"version {payload.get('version')!r} != {self.settings.version}")
            self.misses += 1
            return None

        try:
            created_at = datetime.fromisoformat(str(payload.get("created_at")))
        except ValueError:
            self._discard(path, "invalid created_at")
            self.misses += 1
            return None
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        age_hours = ((now or datetime.now(UTC)) - created_at).total_seconds() / 3600
        if age_hours > self.settings.max_age_hours:
            path.unlink(missing_ok=True)
            self.misses += 1
            return None

        self.hits += 1
        return payload["data"]

    def set(
        self,
        key: str,
        data: Any,
        *,
        components: CacheKeyComponents,
        compute_time_ms: int = 0,
        now: datetime | None = None,
    ) -> None:
        if not self.settings.enabled:
            return
        payload: CacheEntryPayload = {
            "key": key,
            "data": data,
            "created_at": (now or datetime.now(UTC)).isoformat(),
            "version": self.settings.version,
            "compute_time_ms": compute_time_ms,
            "key_components": components,
        }
        try:
            write_json_atomic(
                path=self._entry_path(key),
                payload=payload,
                temp_prefix=CACHE_TEMP_PREFIX,
                temp_suffix=CACHE_TEMP_SUFFIX,
            )
        except OSError as exc:
            logger.warning("Could not write cache entry %s: %s", key, exc)

    def invalidate(self, key: str) -> bool:
        path = self._entry_path(key)
        if not path.is_file():
            return False
        path.unlink(missing_ok=True)
        return True

    def _entries(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob(f"*{CACHE_ENTRY_SUFFIX}"))

    def clear(self) -> int:
        """Delete every entry; returns how many were removed."""
        entries = self._entries()
        for path in entries:
            path.unlink(missing_ok=True)
        return len(entries)

    def stats(self) -> CacheStats:
        entries = self._entries()
        size = 0
        for path in entries:
            try:
                size += path.stat().st_size
            except OSError:
                continue
        return {"hits": self.hits, "misses": self.misses, "entries": len(entries), "size_bytes": size}

    def cleanup(self, *, now: float | None = None) -> int:
        """Drop entries older than the max age, then the oldest beyond max entries."""
        current = now if now is not None else time.time()
        max_age_seconds = self.settings.max_age_hours * 3600
        removed = 0
        survivors: list[tuple[float, Path]] = []
        for path in self._entries():
            try:
                mtime = path.stat().st_mtime
            except OSError:
                continue
            if current - mtime > max_age_seconds:
                path.unlink(missing_ok=True)
                removed += 1
            else:
                survivors.append((mtime, path))

        overflow = len(survivors) - self.settings.max_entries
        if overflow > 0:
            survivors.sort(key=lambda item: (item[0], item[1].name))
            for _, path in survivors[:overflow]:
                path.unlink(missing_ok=True)
                removed += 1
        return removed
