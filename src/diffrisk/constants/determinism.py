"""Constants for determinism hashing."""

from __future__ import annotations

SHORT_HASH_LENGTH: int = 16

VOLATILE_FIELDS: frozenset[str] = frozenset({"timestamp", "duration", "duration_ms", "analysis_time", "output_hash"})
