"""Tests for suppression store persistence."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

from diffrisk.model import SuppressionEntry
from diffrisk.suppressions.store import (
    InMemorySuppressionStore,
    JsonSuppressionStore,
    default_global_path,
    default_local_path,
)

CREATED = datetime(2026, 4, 1, 9, 30, tzinfo=UTC)


def test_default_paths(tmp_path: Path) -> None:
    assert default_local_path(tmp_path) == tmp_path / ".diffrisk" / "suppressions.json"
    assert default_global_path(tmp_path) == tmp_path / ".config" / "diffrisk" / "suppressions.json"


def test_missing_file_loads_empty(tmp_path: Path) -> None:
    store = JsonSuppressionStore(tmp_path / "missing.json")

    assert store.load() == []
    assert store.warnings == []


def test_save_and_load_round_trip_sorted(tmp_path: Path) -> None:
    path = tmp_path / ".diffrisk" / "suppressions.json"
    store = JsonSuppressionStore(path)
    later = SuppressionEntry(signal_id="node-sync-op", created_at=CREATED, file_glob="scripts/**", reason="cli")
    earlier = SuppressionEntry(
        signal_id="large-file",
        created_at=CREATED,
        expires_at=datetime(2026, 5, 1, tzinfo=UTC),
        created_by="dev",
    )

    store.save([later, earlier])

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["version"] == 1
    assert [item["signal_id"] for item in document["suppressions"]] == ["large-file", "node-sync-op"]
    assert "file_glob" not in document["suppressions"][0]
    assert store.load() == [earlier, later]


def test_naive_timestamps_are_utc(tmp_path: Path) -> None:
    path = tmp_path / "suppressions.json"
    path.write_text(
        json.dumps({"version": 1, "suppressions": [{"signal_id": "x", "created_at": "2026-04-01T09:30:00"}]}),
        encoding="utf-8",
    )

    (entry,) = JsonSuppressionStore(path).load()

    assert entry.created_at == CREATED


def test_invalid_json_loads_empty_with_warning(tmp_path: Path) -> None:
    path = tmp_path / "suppressions.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonSuppressionStore(path)

    assert store.load() == []
    assert len(store.warnings) == 1
    assert "malformed suppression store" in store.warnings[0]


def test_schema_violation_loads_empty_with_warning(tmp_path: Path) -> None:
    path = tmp_path / "suppressions.json"
    path.write_text(json.dumps({"version": 2, "suppressions": []}), encoding="utf-8")
    store = JsonSuppressionStore(path)

    assert store.load() == []
    assert "version" in store.warnings[0]


def test_in_memory_store_sorts_on_save() -> None:
    store = InMemorySuppressionStore()
    b = SuppressionEntry(signal_id="b", created_at=CREATED)
    a = SuppressionEntry(signal_id="a", created_at=CREATED)

    store.save([b, a])

    assert store.load() == [a, b]
    assert store.warnings == []


def test_malformed_file_glob_loads_empty_with_warning(tmp_path: Path) -> None:
    path = tmp_path / "suppressions.json"
    entry = {"signal_id": "network-fetch", "file_glob": "src/[]", "created_at": "2026-04-01T09:30:00+00:00"}
    path.write_text(json.dumps({"version": 1, "suppressions": [entry]}), encoding="utf-8")
    store = JsonSuppressionStore(path)

    assert store.load() == []
    assert len(store.warnings) == 1
    assert "suppressions.0.file_glob" in store.warnings[0]
