"""End-to-end tests for snapshot evaluation."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

import pytest

from diffrisk.config import DiffRiskConfig
from diffrisk.exceptions import ConfigError, InputError
from diffrisk.model import PolicyException, Signal, SuppressionEntry
from diffrisk.scanner.ignore import IgnoreSettings
from diffrisk.scanner.orchestrator import evaluate_snapshot, run_evaluation
from diffrisk.scanner.pipeline.conversion import FileSnapshot
from diffrisk.suppressions import InMemorySuppressionStore, SuppressionManager, SuppressionSet
from diffrisk.suppressions.store import JsonSuppressionStore

NOW = datetime(2026, 4, 1, 9, 30, tzinfo=UTC)


def _signal(signal_id: str, signal_class: str, weight: float = 1.0, confidence: str = "high") -> Signal:
    return Signal(
        id=signal_id,
        signal_class=signal_class,  # type: ignore[arg-type]
        category="general",
        weight=weight,
        confidence=confidence,  # type: ignore[arg-type]
        reason=f"{signal_id} detected",
    )


def _risky_file(path: str = "src/auth/login.ts") -> FileSnapshot:
    return FileSnapshot(
        path=path,
        signals=(_signal("auth-boundary", "critical"), _signal("network-fetch", "behavioral")),
        imports=(),
    )


def _quiet_file(path: str = "src/utils/format.ts") -> FileSnapshot:
    return FileSnapshot(path=path, signals=(_signal("console-log", "maintainability", 0.3),), imports=())


def test_critical_file_blocks() -> None:
    run = evaluate_snapshot([_risky_file(), _quiet_file()], now=NOW)

    assert run.evaluation.exit_code == 1
    assert [result.file.path for result in run.evaluation.blockers] == ["src/auth/login.ts"]
    blocker = run.evaluation.blockers[0]
    assert blocker.rule_id == "baseline-critical-risk"
    assert any(action.text == "Run auth tests" for action in blocker.actions)
    assert run.top_n.items[0].result is blocker


def test_suppression_is_applied_before_scoring() -> None:
    suppressions = SuppressionSet(
        local=(SuppressionEntry(signal_id="auth-*", created_at=NOW, file_glob="src/auth/**", reason="reviewed"),)
    )

    run = evaluate_snapshot([_risky_file()], suppressions=suppressions, now=NOW)

    analyzed = run.files[0]
    assert analyzed.breakdown.critical == 0
    assert analyzed.risk_score == pytest.approx(3.0)
    assert [item.signal_id for item in analyzed.suppressed] == ["auth-boundary"]
    assert run.evaluation.exit_code == 0


def test_active_exception_bypasses_rules() -> None:
    config = DiffRiskConfig(exceptions=(PolicyException(id="freeze", paths=("src/auth/**",)),))

    run = evaluate_snapshot([_risky_file()], config=config, now=NOW)

    assert run.evaluation.exit_code == 0
    assert run.evaluation.excepted == ("src/auth/login.ts",)


def test_fail_threshold_lowers_blocker_floor() -> None:
    config = DiffRiskConfig(fail_threshold=2.0)
    snapshot = [FileSnapshot(path="src/a.ts", signals=(_signal("network-fetch", "behavioral", 0.9),))]

    run = evaluate_snapshot(snapshot, config=config, now=NOW)

    assert run.blocker_threshold == 2.0
    assert run.evaluation.blockers[0].rule_id == "config-fail-threshold"


def test_graph_mode_reads_repository_sources(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "core.ts").write_text("export const core = 1;\n", encoding="utf-8")
    (tmp_path / "src" / "service.ts").write_text("import { core } from './core';\n", encoding="utf-8")
    (tmp_path / "src" / "page.ts").write_text("import './service';\n", encoding="utf-8")
    (tmp_path / "node_modules" / "lib").mkdir(parents=True)
    (tmp_path / "node_modules" / "lib" / "index.js").write_text("require('../../src/core');\n", encoding="utf-8")

    run = evaluate_snapshot(
        [FileSnapshot(path="src/core.ts", signals=(_signal("network-fetch", "behavioral"),))],
        root=tmp_path,
        now=NOW,
    )

    radius = run.files[0].blast_radius
    assert radius.direct == ("src/service.ts",)
    assert radius.indirect == ("src/page.ts",)


def test_snapshot_imports_override_repository_sources() -> None:
    files = [
        FileSnapshot(path="src/core.ts", signals=()),
        FileSnapshot(path="src/a.ts", signals=(), source="import { x } from './core';"),
        FileSnapshot(path="src/b.ts", signals=(), imports=("./core",)),
    ]

    run = evaluate_snapshot(files, now=NOW)

    core = next(file for file in run.files if file.path == "src/core.ts")
    assert core.blast_radius.direct == ("src/a.ts", "src/b.ts")


def test_fallback_and_off_modes() -> None:
    files = [FileSnapshot(path="src/core.ts", signals=()), FileSnapshot(path="src/a.ts", imports=("./core",))]

    fallback = evaluate_snapshot(files, config=DiffRiskConfig(blast_radius_mode="fallback"), now=NOW)
    off = evaluate_snapshot(files, config=DiffRiskConfig(blast_radius_mode="off"), now=NOW)

    assert fallback.files[1].blast_radius.confidence == "low"
    assert fallback.files[1].blast_radius.direct == ("src/a.ts",)
    assert all(file.blast_radius.total == 0 for file in off.files)


def test_duplicate_paths_are_rejected() -> None:
    with pytest.raises(InputError):
        evaluate_snapshot([_quiet_file("a.ts"), _quiet_file("a.ts")], now=NOW)


def test_files_are_reported_in_path_order() -> None:
    run = evaluate_snapshot([_quiet_file("z.ts"), _quiet_file("a.ts"), _quiet_file("m.ts")], now=NOW)

    assert [file.path for file in run.files] == ["a.ts", "m.ts", "z.ts"]


def _write_snapshot(tmp_path: Path) -> Path:
    path = tmp_path / "snapshot.json"
    document = {
        "diff": "+fetch('/api')\n",
        "files": [
            {
                "path": "src/auth/login.ts",
                "signals": [
                    {"id": "auth-boundary", "class": "critical", "weight": 1.0},
                    {"id": "network-fetch", "weight": 1.0, "confidence": "high"},
                ],
                "imports": [],
            },
            {"path": "src/utils/format.ts", "signals": [{"id": "console-log", "weight": 0.3}]},
        ],
    }
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def _manager() -> SuppressionManager:
    return SuppressionManager(InMemorySuppressionStore(), InMemorySuppressionStore(), clock=lambda: NOW)


def test_run_evaluation_is_deterministic_across_clocks(tmp_path: Path) -> None:
    snapshot = _write_snapshot(tmp_path)

    first = run_evaluation(root=tmp_path, snapshot_path=snapshot, no_cache=True, manager=_manager(), now=NOW)
    second = run_evaluation(
        root=tmp_path,
        snapshot_path=snapshot,
        no_cache=True,
        manager=_manager(),
        now=datetime(2026, 4, 2, 18, 0, tzinfo=UTC),
    )

    assert first.exit_code == second.exit_code == 1
    assert first.report["timestamp"] != second.report["timestamp"]
    assert first.report["determinism"] == second.report["determinism"]


def test_run_evaluation_uses_cache_on_second_run(tmp_path: Path) -> None:
    snapshot = _write_snapshot(tmp_path)

    first = run_evaluation(root=tmp_path, snapshot_path=snapshot, manager=_manager(), now=NOW)
    second = run_evaluation(root=tmp_path, snapshot_path=snapshot, manager=_manager(), now=NOW)

    assert first.cached is False
    assert second.cached is True
    assert second.report == first.report
    assert second.exit_code == 1


def test_run_evaluation_cache_key_tracks_options(tmp_path: Path) -> None:
    snapshot = _write_snapshot(tmp_path)

    run_evaluation(root=tmp_path, snapshot_path=snapshot, manager=_manager(), now=NOW)
    show_all = run_evaluation(root=tmp_path, snapshot_path=snapshot, manager=_manager(), now=NOW, show_all=True)

    assert show_all.cached is False
    assert show_all.report["top_n"]["limit"] is None


def test_run_evaluation_rejects_unknown_profile(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        run_evaluation(
            root=tmp_path,
            snapshot_path=_write_snapshot(tmp_path),
            profile="enterprise",
            manager=_manager(),
            now=NOW,
        )


def test_run_evaluation_profile_override(tmp_path: Path) -> None:
    outcome = run_evaluation(
        root=tmp_path,
        snapshot_path=_write_snapshot(tmp_path),
        profile="strict",
        no_cache=True,
        manager=_manager(),
        now=NOW,
    )

    assert outcome.report["profile"] == "strict"
    assert outcome.exit_code == 1


def test_evaluate_snapshot_accepts_replaced_config() -> None:
    config = replace(DiffRiskConfig(), top_n=1)

    run = evaluate_snapshot([_risky_file("src/auth/a.ts"), _risky_file("src/auth/b.ts")], config=config, now=NOW)

    assert run.top_n.shown_count == 1
    assert run.top_n.hidden_count == 1


def test_malformed_store_glob_is_skipped_with_warning(tmp_path: Path) -> None:
    store_path = tmp_path / "suppressions.json"
    entry = {"signal_id": "network-fetch", "file_glob": "src/[]", "created_at": "2026-04-01T09:30:00+00:00"}
    store_path.write_text(json.dumps({"version": 1, "suppressions": [entry]}), encoding="utf-8")
    manager = SuppressionManager(JsonSuppressionStore(store_path), InMemorySuppressionStore(), clock=lambda: NOW)

    run = evaluate_snapshot([_risky_file()], suppressions=manager.load(), now=NOW)

    assert run.evaluation.exit_code == 1
    assert len(run.warnings) == 1
    assert "file_glob" in run.warnings[0]


def test_cache_hit_keeps_current_store_warnings(tmp_path: Path) -> None:
    snapshot = _write_snapshot(tmp_path)
    first = run_evaluation(root=tmp_path, snapshot_path=snapshot, manager=_manager(), now=NOW)

    store_path = tmp_path / "broken.json"
    store_path.write_text("{not json", encoding="utf-8")
    broken = SuppressionManager(JsonSuppressionStore(store_path), InMemorySuppressionStore(), clock=lambda: NOW)
    second = run_evaluation(root=tmp_path, snapshot_path=snapshot, manager=broken, now=NOW)

    assert not any("malformed" in warning for warning in first.report["warnings"])
    assert second.cached is True
    assert any("malformed suppression store" in warning for warning in second.warnings)
    assert any("malformed suppression store" in warning for warning in second.report["warnings"])
    assert len(second.report["warnings"]) == len(set(second.report["warnings"]))


def test_ignored_files_are_left_out_of_evaluation() -> None:
    files = [
        _risky_file("package-lock.json"),
        _risky_file("src/auth/login.test.ts"),
        _quiet_file(),
    ]

    run = evaluate_snapshot(files, now=NOW)

    assert [file.path for file in run.files] == ["src/utils/format.ts"]
    assert run.evaluation.exit_code == 0
    assert [(item.path, item.source) for item in run.ignored] == [
        ("package-lock.json", "always"),
        ("src/auth/login.test.ts", "test"),
    ]

    config = replace(DiffRiskConfig(), ignore=IgnoreSettings(include_tests=True))
    included = evaluate_snapshot(files, config=config, now=NOW)
    assert [file.path for file in included.files] == ["src/auth/login.test.ts", "src/utils/format.ts"]
    assert included.evaluation.exit_code == 1


def test_config_ignore_patterns_reach_the_report(tmp_path: Path) -> None:
    (tmp_path / ".diffrisk.yml").write_text("ignore:\n  patterns:\n    - src/auth/**\n", encoding="utf-8")

    outcome = run_evaluation(
        root=tmp_path,
        snapshot_path=_write_snapshot(tmp_path),
        no_cache=True,
        manager=_manager(),
        now=NOW,
    )

    assert outcome.exit_code == 0
    assert outcome.report["summary"]["files"] == 1
    assert outcome.report["summary"]["ignored"] == 1
    assert outcome.report["ignored"] == [
        {
            "path": "src/auth/login.ts",
            "source": "user",
            "pattern": "src/auth/**",
            "reason": "matches ignore.patterns in config",
            "how_to_include": "remove the pattern from ignore.patterns",
        }
    ]
