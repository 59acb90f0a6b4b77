"""Constants for the per-key analysis cache."""

from __future__ import annotations

CACHE_VERSION: int = 1
DEFAULT_CACHE_DIR: str = ".diffrisk/cache"
DEFAULT_CACHE_MAX_AGE_HOURS: float = 24.0
DEFAULT_CACHE_MAX_ENTRIES: int = 100
CACHE_ENTRY_SUFFIX: str = ".json"
CACHE_TEMP_PREFIX: str = ".cache-"
CACHE_TEMP_SUFFIX: str = ".tmp"

EMPTY_DIFF_HASH: str = "empty"
UNKNOWN_HEAD_SHA: str = "unknown"
GIT_TIMEOUT_SECONDS: float = 5.0
