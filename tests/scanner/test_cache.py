"""Tests for the per-key analysis cache."""

from __future__ import annotations

import json
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

from diffrisk.scanner.cache import AnalysisCache, CacheSettings, build_cache_key
from diffrisk.scanner.pipeline.cache_utils import build_key_components, hash_diff, read_head_sha
from diffrisk.types import CacheKeyComponents

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _components(**overrides: str | None) -> CacheKeyComponents:
    components: CacheKeyComponents = {
        "repo_path": "/repo",
        "head_sha": "abc123",
        "base": "main",
        "scope": "working",
        "tool_version": "0.4.0",
        "config_hash": "cfg",
        "diff_hash": "diff",
        "suppressions_hash": None,
    }
    components.update(overrides)  # type: ignore[typeddict-item]
    return components


def test_cache_key_is_stable_and_sensitive_to_components() -> None:
    assert build_cache_key(_components()) == build_cache_key(_components())
    assert build_cache_key(_components()) != build_cache_key(_components(head_sha="def456"))
    assert build_cache_key(_components()) != build_cache_key(_components(suppressions_hash="s1"))


def test_set_then_get_round_trip_counts_hits(tmp_path: Path) -> None:
    cache = AnalysisCache(tmp_path)
    key = build_cache_key(_components())

    assert cache.get(key, now=NOW) is None
    cache.set(key, {"exit_code": 0}, components=_components(), compute_time_ms=5, now=NOW)

    assert cache.get(key, now=NOW + timedelta(hours=1)) == {"exit_code": 0}
    assert (cache.hits, cache.misses) == (1, 1)
    stored = json.loads((tmp_path / ".diffrisk" / "cache" / f"{key}.json").read_text(encoding="utf-8"))
    assert stored["key_components"]["head_sha"] == "abc123"
    assert stored["version"] == 1


def test_expired_entry_is_a_miss_and_deleted(tmp_path: Path) -> None:
    cache = AnalysisCache(tmp_path, CacheSettings(max_age_hours=1.0))
    cache.set("k", {"x": 1}, components=_components(), now=NOW)

    assert cache.get("k", now=NOW + timedelta(hours=2)) is None
    assert cache.stats()["entries"] == 0


def test_corrupt_entry_self_heals(tmp_path: Path) -> None:
    cache = AnalysisCache(tmp_path)
    cache.directory.mkdir(parents=True)
    corrupt = cache.directory / "k.json"
    corrupt.write_text("{not json", encoding="utf-8")

    assert cache.get("k", now=NOW) is None
    assert not corrupt.exists()


def test_version_mismatch_is_a_miss(tmp_path: Path) -> None:
    AnalysisCache(tmp_path, CacheSettings(version=1)).set("k", {"x": 1}, components=_components(), now=NOW)

    newer = AnalysisCache(tmp_path, CacheSettings(version=2))

    assert newer.get("k", now=NOW) is None
    assert not (newer.directory / "k.json").exists()


def test_disabled_cache_never_reads_or_writes(tmp_path: Path) -> None:
    cache = AnalysisCache(tmp_path, CacheSettings(enabled=False))
    cache.set("k", {"x": 1}, components=_components(), now=NOW)

    assert cache.get("k", now=NOW) is None
    assert not cache.directory.exists()


def test_invalidate_clear_and_stats(tmp_path: Path) -> None:
    cache = AnalysisCache(tmp_path)
    for key in ("a", "b", "c"):
        cache.set(key, {"key": key}, components=_components(), now=NOW)

    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    stats = cache.stats()
    assert stats["entries"] == 2
    assert stats["size_bytes"] > 0
    assert cache.clear() == 2
    assert cache.stats()["entries"] == 0


def test_cleanup_drops_old_then_oldest_entries(tmp_path: Path) -> None:
    cache = AnalysisCache(tmp_path, CacheSettings(max_entries=2, max_age_hours=24.0))
    now = 1_000_000.0
    ages_hours = {"stale": 30, "old": 3, "mid": 2, "new": 1}
    for key, age in ages_hours.items():
        cache.set(key, {}, components=_components(), now=NOW)
        mtime = now - age * 3600
        os.utime(cache.directory / f"{key}.json", (mtime, mtime))

    removed = cache.cleanup(now=now)

    assert removed == 2
    assert sorted(path.stem for path in cache.directory.glob("*.json")) == ["mid", "new"]


def test_hash_diff_and_key_components(tmp_path: Path) -> None:
    assert hash_diff("  \n") == "empty"
    assert hash_diff("+a\r\n") == hash_diff("+a\n")

    components = build_key_components(
        root=tmp_path,
        head_sha="sha",
        base="main",
        scope="staged",
        tool_version="1.0",
        config_hash="cfg",
        diff_content=None,
        suppressions_hash="sup",
    )

    assert components["diff_hash"] is None
    assert components["repo_path"] == str(tmp_path.resolve())


def test_read_head_sha_outside_git_is_unknown(tmp_path: Path) -> None:
    warnings: list[str] = []

    assert read_head_sha(tmp_path, warnings) == "unknown"
    assert warnings
