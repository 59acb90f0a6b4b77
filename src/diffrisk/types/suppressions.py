"""Typed payloads for persisted suppression stores."""

from __future__ import annotations

from typing import TypedDict


class SuppressionEntryPayload(TypedDict, total=False):
    """Serialized ``SuppressionEntry``."""

    signal_id: str
    file_glob: str | None
    reason: str | None
    created_at: str
    expires_at: str | None
    created_by: str | None


class SuppressionFilePayload(TypedDict):
    """Top-level suppression store document."""

    version: int
    suppressions: list[SuppressionEntryPayload]


class SuppressionStats(TypedDict):
    total: int
    suppressed: int
    local: int
    global_: int
