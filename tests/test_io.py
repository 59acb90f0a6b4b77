"""Tests for JSON file helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from diffrisk.io import canonical_json, load_json_file, write_json_atomic


def test_canonical_json_sorts_keys_without_whitespace() -> None:
    assert canonical_json({"b": 1, "a": [2, {"d": 3, "c": 4}]}) == '{"a":[2,{"c":4,"d":3}],"b":1}'
    assert canonical_json({"name": "café"}) == '{"name":"café"}'


def test_write_json_atomic_creates_parents_and_leaves_no_temp(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "data.json"

    write_json_atomic(path=path, payload={"b": 1, "a": 2}, temp_prefix=".tmp-", temp_suffix=".json")

    text = path.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert text.index('"a"') < text.index('"b"')
    assert load_json_file(path) == {"a": 2, "b": 1}
    assert [p.name for p in path.parent.iterdir()] == ["data.json"]


def test_write_json_atomic_replaces_existing(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text('{"old": true}', encoding="utf-8")

    write_json_atomic(path=path, payload={"new": True}, temp_prefix=".tmp-", temp_suffix=".json")

    assert json.loads(path.read_text(encoding="utf-8")) == {"new": True}


def test_write_json_atomic_cleans_up_on_failure(tmp_path: Path) -> None:
    path = tmp_path / "data.json"

    with pytest.raises(TypeError):
        write_json_atomic(path=path, payload={"bad": object()}, temp_prefix=".tmp-", temp_suffix=".json")

    assert list(tmp_path.iterdir()) == []


def test_load_json_file_rejects_invalid(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(ValueError):
        load_json_file(path)


def test_write_json_atomic_keeps_old_document_when_rename_fails(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "data.json"
    path.write_text('{"old": true}\n', encoding="utf-8")

    def refuse(self: Path, target: Path) -> Path:
        raise PermissionError("read-only")

    monkeypatch.setattr(Path, "replace", refuse)

    with pytest.raises(PermissionError):
        write_json_atomic(path=path, payload={"new": True}, temp_prefix=".tmp-", temp_suffix=".json")

    assert [p.name for p in tmp_path.iterdir()] == ["data.json"]
    assert path.read_text(encoding="utf-8") == '{"old": true}\n'
