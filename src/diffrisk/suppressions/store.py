"""Suppression store repositories.

Stores are passed into the pipeline explicitly.  ``JsonSuppressionStore``
persists to disk; ``InMemorySuppressionStore`` backs tests and dry runs.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from jsonschema import Draft202012Validator

from diffrisk.constants.suppressions import (
    GLOBAL_SUPPRESSIONS_RELATIVE_PATH,
    LOCAL_SUPPRESSIONS_RELATIVE_PATH,
    SUPPRESSIONS_SCHEMA,
    SUPPRESSIONS_TEMP_PREFIX,
    SUPPRESSIONS_TEMP_SUFFIX,
    SUPPRESSIONS_VERSION,
)
from diffrisk.io import load_json_file, write_json_atomic
from diffrisk.model import SuppressionEntry
from diffrisk.types import SuppressionEntryPayload, SuppressionFilePayload
from diffrisk.utils.globs import glob_error

logger = logging.getLogger(__name__)

_VALIDATOR = Draft202012Validator(SUPPRESSIONS_SCHEMA)


class SuppressionStore(Protocol):
    """Repository of suppression entries for one scope."""

    def load(self) -> list[SuppressionEntry]: ...

    def save(self, entries: list[SuppressionEntry]) -> None: ...

    @property
    def warnings(self) -> list[str]: ...


def default_local_path(root: Path) -> Path:
    return root / LOCAL_SUPPRESSIONS_RELATIVE_PATH


def default_global_path(home: Path | None = None) -> Path:
    return (home if home is not None else Path.home()) / GLOBAL_SUPPRESSIONS_RELATIVE_PATH


def parse_timestamp(value: str) -> datetime:
    """Parse ISO-8601; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def entry_sort_key(entry: SuppressionEntry) -> tuple[str, str, str]:
    return (entry.signal_id, entry.file_glob or "", entry.created_at.isoformat())


def entry_from_payload(payload: SuppressionEntryPayload) -> SuppressionEntry:
    expires_raw = payload.get("expires_at")
    return SuppressionEntry(
        signal_id=payload["signal_id"],
        created_at=parse_timestamp(payload["created_at"]),
        file_glob=payload.get("file_glob") or None,
        reason=payload.get("reason"),
        expires_at=parse_timestamp(expires_raw) if expires_raw else None,
        created_by=payload.get("created_by"),
    )


def entries_to_payload(entries: list[SuppressionEntry]) -> SuppressionFilePayload:
    """Serialize with entries sorted so stored files diff minimally."""
    return {
        "version": SUPPRESSIONS_VERSION,
        "suppressions": [entry.to_payload() for entry in sorted(entries, key=entry_sort_key)],
    }


def entries_from_document(document: object) -> list[SuppressionEntry]:
    """Validate and decode a parsed store document.

    Raises ``ValueError`` describing the first schema violation or
    unusable ``file_glob``.
    """
    errors = sorted(_VALIDATOR.iter_errors(document), key=lambda error: list(error.path))
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.path) or "root"
        raise ValueError(f"{location}: {first.message}")
    assert isinstance(document, dict)
    entries = [entry_from_payload(item) for item in document["suppressions"]]
    for index, entry in enumerate(entries):
        error = glob_error(entry.file_glob) if entry.file_glob else None
        if error is not None:
            raise ValueError(f"suppressions.{index}.file_glob: {error}")
    return entries


class JsonSuppressionStore:
    """Suppression entries persisted as one JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._warnings: list[str] = []

    @property
    def warnings(self) -> list[str]:
        return list(self._warnings)

    def load(self) -> list[SuppressionEntry]:
        """Read entries; a missing file is empty, a malformed one is empty with a warning."""
        self._warnings = []
        if not self.path.is_file():
            return []
        try:
            return entries_from_document(load_json_file(self.path))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            message = f"Ignoring malformed suppression store {self.path}: {exc}"
            logger.warning(message)
            self._warnings.append(message)
            return []

    def save(self, entries: list[SuppressionEntry]) -> None:
        write_json_atomic(
            path=self.path,
            payload=entries_to_payload(entries),
            temp_prefix=SUPPRESSIONS_TEMP_PREFIX,
            temp_suffix=SUPPRESSIONS_TEMP_SUFFIX,
        )


class InMemorySuppressionStore:
    """Store kept in process memory, with the same sort-on-save behavior."""

    def __init__(self, entries: list[SuppressionEntry] | None = None) -> None:
        self._entries: list[SuppressionEntry] = list(entries or [])

    @property
    def warnings(self) -> list[str]:
        return []

    def load(self) -> list[SuppressionEntry]:
        return list(self._entries)

    def save(self, entries: list[SuppressionEntry]) -> None:
        self._entries = sorted(entries, key=entry_sort_key)
