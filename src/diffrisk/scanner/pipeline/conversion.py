"""Decode detector snapshots and assemble analyzed files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from diffrisk.constants.signals import VALID_CONFIDENCES, VALID_SIGNAL_CLASSES
from diffrisk.exceptions import InputError
from diffrisk.io import load_json_file
from diffrisk.model import (
    AnalyzedFile,
    BlastRadiusResult,
    GatedSignals,
    RiskScoreBreakdown,
    Signal,
    SuppressedSignal,
)
from diffrisk.scanner.gate import resolve_signal_class
from diffrisk.scanner.score import build_evidence, risk_band
from diffrisk.utils.globs import normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileSnapshot:
    """One changed file as handed over by the detector and diff layer."""

    path: str
    signals: tuple[Signal, ...] = ()
    imports: tuple[str, ...] | None = None
    source: str | None = None


@dataclass(frozen=True)
class Snapshot:
    files: tuple[FileSnapshot, ...]
    diff: str | None = None
    base: str | None = None


def _string_list(value: Any, field: str, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InputError(f"{where}: `{field}` must be a list of strings")
    return tuple(value)


def signal_from_dict(raw: Any, where: str) -> Signal:
    """Decode one detector signal, rejecting values outside the model."""
    if not isinstance(raw, dict):
        raise InputError(f"{where}: signal must be a mapping")
    signal_id = raw.get("id")
    if not isinstance(signal_id, str) or not signal_id.strip():
        raise InputError(f"{where}: signal `id` must be a non-empty string")
    where = f"{where} signal {signal_id!r}"

    declared = raw.get("class", raw.get("signal_class"))
    if declared is not None and declared not in VALID_SIGNAL_CLASSES:
        raise InputError(f"{where}: unknown class {declared!r}")

    confidence = raw.get("confidence")
    if confidence is not None and confidence not in VALID_CONFIDENCES:
        raise InputError(f"{where}: unknown confidence {confidence!r}")

    weight = raw.get("weight", 0.0)
    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not 0.0 <= weight <= 1.0:
        raise InputError(f"{where}: `weight` must be a number in [0, 1]")

    lines = raw.get("lines")
    if lines is None and raw.get("line") is not None:
        lines = [raw["line"]]
    if lines is None:
        lines = []
    if not isinstance(lines, list) or not all(isinstance(n, int) and not isinstance(n, bool) for n in lines):
        raise InputError(f"{where}: `lines` must be a list of integers")

    return Signal(
        id=signal_id.strip(),
        signal_class=resolve_signal_class(signal_id.strip(), declared),
        category=str(raw.get("category") or "general"),
        weight=float(weight),
        confidence=confidence,
        lines=tuple(lines),
        reason=str(raw.get("reason") or ""),
        title=str(raw.get("title") or ""),
        tags=_string_list(raw.get("tags"), "tags", where),
        in_changed_range=bool(raw.get("in_changed_range", True)),
        evidence_kind=raw.get("evidence_kind"),
    )


def file_from_dict(raw: Any, index: int) -> FileSnapshot:
    where = f"files[{index}]"
    if not isinstance(raw, dict):
        raise InputError(f"{where}: must be a mapping")
    path = raw.get("path")
    if not isinstance(path, str) or not path.strip():
        raise InputError(f"{where}: `path` must be a non-empty string")
    where = f"{where} ({path})"
    signals_raw = raw.get("signals", [])
    if not isinstance(signals_raw, list):
        raise InputError(f"{where}: `signals` must be a list")
    source = raw.get("source")
    if source is not None and not isinstance(source, str):
        raise InputError(f"{where}: `source` must be a string")
    imports = raw.get("imports")
    return FileSnapshot(
        path=normalize_path(path),
        signals=tuple(signal_from_dict(item, where) for item in signals_raw),
        imports=_string_list(imports, "imports", where) if imports is not None else None,
        source=source,
    )


def snapshot_from_document(document: Any) -> Snapshot:
    """Decode ``{"files": [...], "diff"?: str, "base"?: str}``."""
    if not isinstance(document, dict):
        raise InputError("snapshot must be a JSON object")
    files_raw = document.get("files")
    if not isinstance(files_raw, list):
        raise InputError("snapshot `files` must be a list")
    files = tuple(file_from_dict(item, index) for index, item in enumerate(files_raw))

    seen: set[str] = set()
    for file in files:
        if file.path in seen:
            raise InputError(f"snapshot lists {file.path!r} more than once")
        seen.add(file.path)

    diff = document.get("diff")
    base = document.get("base")
    return Snapshot(
        files=files,
        diff=diff if isinstance(diff, str) else None,
        base=base if isinstance(base, str) else None,
    )


def load_snapshot(path: Path) -> Snapshot:
    try:
        document = load_json_file(path)
    except OSError as exc:
        raise InputError(f"Cannot read snapshot {path}: {exc}") from exc
    except ValueError as exc:
        raise InputError(f"Snapshot {path} is not valid JSON: {exc}") from exc
    return snapshot_from_document(document)


def build_analyzed_file(
    path: str,
    *,
    gated: GatedSignals,
    breakdown: RiskScoreBreakdown,
    radius: BlastRadiusResult,
    suppressed: tuple[SuppressedSignal, ...] = (),
) -> AnalyzedFile:
    return AnalyzedFile(
        path=path,
        risk_score=breakdown.total,
        risk_band=risk_band(breakdown.total),
        breakdown=breakdown,
        gated=gated,
        blast_radius=radius,
        evidence=build_evidence(gated.scored),
        suppressed=suppressed,
    )
