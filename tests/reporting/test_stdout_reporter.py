"""Tests for the terminal summary."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from diffrisk.config import DiffRiskConfig
from diffrisk.constants.reporting import ANSI_GREEN, ANSI_RED, ANSI_RESET
from diffrisk.model import Signal
from diffrisk.reporting import StdoutReporter, build_report
from diffrisk.scanner.orchestrator import evaluate_snapshot
from diffrisk.scanner.pipeline.conversion import FileSnapshot

NOW = datetime(2026, 4, 1, tzinfo=UTC)


def _signal(signal_id: str, signal_class: str, weight: float = 1.0) -> Signal:
    return Signal(
        id=signal_id,
        signal_class=signal_class,  # type: ignore[arg-type]
        category="general",
        weight=weight,
        confidence="high",
    )


def _report(files: list[FileSnapshot], *, limit: int | None = None, warnings: tuple[str, ...] = ()) -> dict[str, Any]:
    run = evaluate_snapshot(files, config=DiffRiskConfig(), now=NOW, limit=limit)
    return build_report(
        run,
        config=DiffRiskConfig(),
        input_hash="0123456789abcdef",
        duration_ms=42,
        timestamp=NOW.isoformat(),
        warnings=warnings,
    )


def _blocking_file(path: str = "src/auth/login.ts") -> FileSnapshot:
    return FileSnapshot(path=path, signals=(_signal("auth-boundary", "critical"), _signal("network-fetch", "behavioral")))


def test_header_and_items_without_color() -> None:
    output = StdoutReporter(_report([_blocking_file()]), color=False).render()

    assert "DIFFRISK" in output
    assert "Risk summary" in output
    assert "Results     1 blocker / 0 warning / 0 info" in output
    assert "Profile     minimal (blocker threshold 7.0)" in output
    assert "Verdict     FAIL" in output
    assert "1. [blocker] src/auth/login.ts  risk 8.0  blast 0  (baseline-critical-risk)" in output
    assert "Critical [general]: auth-boundary (+5.0)" in output
    assert "-> test: Run auth tests" in output
    assert "Why these:" in output
    assert "\033[" not in output


def test_passing_report_is_green() -> None:
    quiet = FileSnapshot(path="src/a.ts", signals=(_signal("console-log", "maintainability", 0.2),))

    output = StdoutReporter(_report([quiet]), color=True).render()

    assert f"{ANSI_GREEN}PASS{ANSI_RESET}" in output
    assert "No issues found" in output


def test_failing_report_is_red() -> None:
    output = StdoutReporter(_report([_blocking_file()]), color=True).render()

    assert f"{ANSI_RED}FAIL{ANSI_RESET}" in output
    assert f"[{ANSI_RED}blocker{ANSI_RESET}]" in output


def test_hidden_message_and_warnings() -> None:
    report = _report(
        [_blocking_file("src/auth/a.ts"), _blocking_file("src/auth/b.ts")],
        limit=1,
        warnings=("Could not read git HEAD",),
    )

    output = StdoutReporter(report, color=False).render()

    assert "Showing top 1 of 2 issues" in output
    assert "1 more issue(s) hidden. Next: `src/auth/b.ts`" in output
    assert "warning: Could not read git HEAD" in output


def test_verbose_shows_timing_and_hash() -> None:
    output = StdoutReporter(_report([_blocking_file()]), color=False, verbose=True).render()

    assert "Duration    42ms" in output
    assert "Input hash  0123456789abcdef" in output


def test_gate_summary_lists_filtered_signals_only_when_verbose() -> None:
    noisy = Signal(id="todo-comment", signal_class="maintainability", category="style", weight=0.1, confidence="low")
    file = FileSnapshot(path="src/auth/login.ts", signals=(*_blocking_file().signals, noisy))
    report = _report([file])

    gate = report["files"][0]["gate"]
    assert gate["summary"] == "2 high-impact (3 total)"
    assert gate["has_blocking"] is True
    assert gate["display"] == ["auth-boundary", "network-fetch"]
    assert gate["detailed"] == ["auth-boundary", "network-fetch", "todo-comment"]

    plain = StdoutReporter(report, color=False).render()
    verbose = StdoutReporter(report, color=False, verbose=True).render()
    assert "Signals: 2 high-impact (3 total): auth-boundary, network-fetch\n" in plain
    assert "Signals: 2 high-impact (3 total): auth-boundary, network-fetch, todo-comment" in verbose


def test_ignored_files_are_counted_and_listed_when_verbose() -> None:
    report = _report([_blocking_file(), _blocking_file("yarn.lock")])

    plain = StdoutReporter(report, color=False).render()
    assert "Ignored     1 file(s)" in plain
    assert "yarn.lock [always" not in plain

    verbose = StdoutReporter(report, color=False, verbose=True).render()
    assert "yarn.lock [always: **/yarn.lock]" in verbose
