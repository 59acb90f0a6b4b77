"""Suppression entries and resolution candidates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from diffrisk.types import SuppressionEntryPayload, SuppressionScope


@dataclass(frozen=True)
class SuppressionEntry:
    """A durable rule silencing ``signal_id`` for files matching ``file_glob``.

    ``signal_id`` is an exact id, ``*``, or a ``prefix-*`` pattern.  Entries
    without a glob apply to every file.  Timestamps are timezone-aware UTC.
    """

    signal_id: str
    created_at: datetime
    file_glob: str | None = None
    reason: str | None = None
    expires_at: datetime | None = None
    created_by: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def to_payload(self) -> SuppressionEntryPayload:
        payload: SuppressionEntryPayload = {
            "signal_id": self.signal_id,
            "created_at": self.created_at.isoformat(),
        }
        if self.file_glob is not None:
            payload["file_glob"] = self.file_glob
        if self.reason is not None:
            payload["reason"] = self.reason
        if self.expires_at is not None:
            payload["expires_at"] = self.expires_at.isoformat()
        if self.created_by is not None:
            payload["created_by"] = self.created_by
        return payload


@dataclass(frozen=True)
class SuppressionMatch:
    entry: SuppressionEntry
    scope: SuppressionScope
    specificity: int
    # Position in the combined candidate list; breaks specificity ties.
    order: int = 0
