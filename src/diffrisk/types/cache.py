"""Typed payloads for persisted cache entries."""

from __future__ import annotations

from typing import Any, TypedDict


class CacheKeyComponents(TypedDict):
    """Inputs hashed into one cache key."""

    repo_path: str
    head_sha: str
    base: str
    scope: str
    tool_version: str
    config_hash: str
    diff_hash: str | None
    suppressions_hash: str | None


class CacheEntryPayload(TypedDict):
    """One cache file on disk."""

    key: str
    data: Any
    created_at: str
    version: int
    compute_time_ms: int
    key_components: CacheKeyComponents


class CacheStats(TypedDict):
    """Counters reported by ``AnalysisCache.stats``."""

    hits: int
    misses: int
    entries: int
    size_bytes: int
