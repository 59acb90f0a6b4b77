"""Per-file evaluation entities: signals, gate output, scores and radius."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from diffrisk.types import Confidence, JsonObject, RiskBand, SignalClass


@dataclass(frozen=True)
class Signal:
    """One finding produced by a detector for a file.

    ``confidence`` may be unset when it arrives from a detector; the
    confidence gate normalizes it before any triage happens.
    """

    id: str
    signal_class: SignalClass | None
    category: str
    weight: float
    confidence: Confidence | None = None
    lines: tuple[int, ...] = ()
    reason: str = ""
    title: str = ""
    tags: tuple[str, ...] = ()
    in_changed_range: bool = True
    evidence_kind: str | None = None

    def with_confidence(self, confidence: Confidence) -> Signal:
        return replace(self, confidence=confidence)

    def to_dict(self) -> JsonObject:
        return {
            "id": self.id,
            "class": self.signal_class,
            "category": self.category,
            "weight": self.weight,
            "confidence": self.confidence,
            "lines": list(self.lines),
            "reason": self.reason,
            "title": self.title,
            "tags": list(self.tags),
            "in_changed_range": self.in_changed_range,
            "evidence_kind": self.evidence_kind,
        }


@dataclass(frozen=True)
class GateStats:
    total: int
    blocking: int
    advisory: int
    filtered: int
    blocking_ratio: float

    def to_dict(self) -> JsonObject:
        return {
            "total": self.total,
            "blocking": self.blocking,
            "advisory": self.advisory,
            "filtered": self.filtered,
            "blocking_ratio": self.blocking_ratio,
        }


@dataclass(frozen=True)
class GatedSignals:
    """Triage of one file's signals; every list keeps input order."""

    blocking: tuple[Signal, ...]
    advisory: tuple[Signal, ...]
    filtered: tuple[Signal, ...]
    all: tuple[Signal, ...]
    stats: GateStats
    # Non-filtered signals in input order.
    scored: tuple[Signal, ...] = ()

    def to_dict(self) -> JsonObject:
        return {
            "blocking": [signal.id for signal in self.blocking],
            "advisory": [signal.id for signal in self.advisory],
            "filtered": [signal.id for signal in self.filtered],
            "stats": self.stats.to_dict(),
        }


@dataclass(frozen=True)
class RiskScoreBreakdown:
    critical: float
    behavioral: float
    maintainability: float
    confidence: float
    total: float
    max_severity: str = "info"
    signal_count: int = 0
    reason_chain: tuple[str, ...] = ()

    def to_dict(self) -> JsonObject:
        return {
            "critical": self.critical,
            "behavioral": self.behavioral,
            "maintainability": self.maintainability,
            "confidence": self.confidence,
            "total": self.total,
            "max_severity": self.max_severity,
            "signal_count": self.signal_count,
            "reason_chain": list(self.reason_chain),
        }


@dataclass(frozen=True)
class BlastRadiusResult:
    direct: tuple[str, ...]
    indirect: tuple[str, ...]
    total: int
    confidence: Confidence
    confidence_reason: str

    def to_dict(self) -> JsonObject:
        return {
            "direct": list(self.direct),
            "indirect": list(self.indirect),
            "total": self.total,
            "confidence": self.confidence,
            "confidence_reason": self.confidence_reason,
        }


@dataclass(frozen=True)
class Evidence:
    """A human-readable pointer derived from one scored signal."""

    message: str
    severity: str
    tag: str
    line: int | None = None

    def to_dict(self) -> JsonObject:
        return {"message": self.message, "severity": self.severity, "tag": self.tag, "line": self.line}


@dataclass(frozen=True)
class SuppressedSignal:
    """A signal silenced by a suppression entry, kept for auditing."""

    signal_id: str
    scope: str
    matched_pattern: str
    file_glob: str | None
    reason: str | None

    def to_dict(self) -> JsonObject:
        return {
            "signal_id": self.signal_id,
            "scope": self.scope,
            "matched_pattern": self.matched_pattern,
            "file_glob": self.file_glob,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class AnalyzedFile:
    """Everything the policy engine and Top-N selector know about one file."""

    path: str
    risk_score: float
    risk_band: RiskBand
    breakdown: RiskScoreBreakdown
    gated: GatedSignals
    blast_radius: BlastRadiusResult
    evidence: tuple[Evidence, ...] = ()
    suppressed: tuple[SuppressedSignal, ...] = ()

    @property
    def signal_ids(self) -> tuple[str, ...]:
        """Ids of non-filtered signals, deduplicated in first-seen order."""
        return tuple(dict.fromkeys(signal.id for signal in self.gated.scored))

    @property
    def signal_classes(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(s.signal_class for s in self.gated.scored if s.signal_class is not None))

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "risk_score": self.risk_score,
            "risk_band": self.risk_band,
            "breakdown": self.breakdown.to_dict(),
            "gate": self.gated.to_dict(),
            "blast_radius": self.blast_radius.to_dict(),
            "evidence": [item.to_dict() for item in self.evidence],
            "suppressed": [item.to_dict() for item in self.suppressed],
        }
