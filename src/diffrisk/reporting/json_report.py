"""Machine-readable evaluation report."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from diffrisk import __version__
from diffrisk.constants.reporting import REPORT_SCHEMA_VERSION, REPORT_TEMP_PREFIX, REPORT_TEMP_SUFFIX
from diffrisk.io import write_json_atomic
from diffrisk.policy.topn import format_hidden_message, format_top_n_summary
from diffrisk.scanner.gate import detailed_signals, display_signals, format_gate_stats, has_blocking_signals

if TYPE_CHECKING:
    from diffrisk.config import DiffRiskConfig
    from diffrisk.model import AnalyzedFile
    from diffrisk.scanner.orchestrator import EvaluationRun


def _file_entry(file: AnalyzedFile) -> dict[str, Any]:
    entry = file.to_dict()
    entry["gate"].update(
        {
            "summary": format_gate_stats(file.gated.stats),
            "has_blocking": has_blocking_signals(file.gated),
            "display": [signal.id for signal in display_signals(file.gated)],
            "detailed": [signal.id for signal in detailed_signals(file.gated)],
        }
    )
    return entry


def build_report(
    run: EvaluationRun,
    *,
    config: DiffRiskConfig,
    input_hash: str,
    duration_ms: int,
    timestamp: str,
    warnings: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Assemble the report dict; ``determinism.output_hash`` is filled in by the caller."""
    evaluation = run.evaluation
    suppressed_count = sum(len(file.suppressed) for file in run.files)
    top_n = run.top_n.to_dict()
    top_n["summary"] = format_top_n_summary(run.top_n)
    top_n["hidden_message"] = format_hidden_message(run.top_n)
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "tool": {"name": "diffrisk", "version": __version__},
        "timestamp": timestamp,
        "duration_ms": duration_ms,
        "profile": config.profile,
        "blocker_threshold": run.blocker_threshold,
        "blast_radius_mode": config.blast_radius_mode,
        "exit_code": evaluation.exit_code,
        "summary": {
            "files": len(run.files),
            "blockers": len(evaluation.blockers),
            "warnings": len(evaluation.warnings),
            "infos": len(evaluation.infos),
            "suppressed": suppressed_count,
            "ignored": len(run.ignored),
            "excepted": list(evaluation.excepted),
        },
        "results": {
            "blockers": [result.to_dict() for result in evaluation.blockers],
            "warnings": [result.to_dict() for result in evaluation.warnings],
            "infos": [result.to_dict() for result in evaluation.infos],
        },
        "top_n": top_n,
        "files": [_file_entry(file) for file in run.files],
        "ignored": [item.to_dict() for item in run.ignored],
        "warnings": list(warnings),
        "determinism": {"input_hash": input_hash, "output_hash": None},
    }


def render_report_json(report: dict[str, Any]) -> str:
    return json.dumps(report, indent=2, sort_keys=True, ensure_ascii=False)


def write_report(path: Path, report: dict[str, Any]) -> None:
    write_json_atomic(
        path=path,
        payload=report,
        temp_prefix=REPORT_TEMP_PREFIX,
        temp_suffix=REPORT_TEMP_SUFFIX,
    )
