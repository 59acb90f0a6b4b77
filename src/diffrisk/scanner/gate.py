"""Confidence gate: normalize signal confidence, then triage into tiers.

Only high-confidence critical or behavioral signals may block a merge.
Low-confidence signals are filtered out of scoring entirely, so an unknown
detector can never fail a build on its own.
"""

from __future__ import annotations

from diffrisk.constants.gate import (
    AST_EVIDENCE_KIND,
    BLOCKING_CLASSES,
    SECURITY_ID_KEYWORDS,
    SECURITY_ID_PREFIX,
)
from diffrisk.constants.signals import SIGNAL_ID_CLASS
from diffrisk.exceptions import InvariantViolation
from diffrisk.model import GatedSignals, GateStats, Signal
from diffrisk.types import Confidence, GateTier, SignalClass


def resolve_signal_class(signal_id: str, declared: SignalClass | None) -> SignalClass | None:
    """Return the declared class, else the built-in class for ``signal_id``."""
    if declared is not None:
        return declared
    return SIGNAL_ID_CLASS.get(signal_id)  # type: ignore[return-value]


def is_security_marked(signal_id: str) -> bool:
    lowered = signal_id.lower()
    if lowered.startswith(SECURITY_ID_PREFIX):
        return True
    return any(keyword in lowered for keyword in SECURITY_ID_KEYWORDS)


def infer_confidence(signal: Signal) -> Confidence:
    """Confidence for a signal that arrived without one."""
    if signal.signal_class == "critical":
        return "high"
    if is_security_marked(signal.id):
        return "high"
    if signal.evidence_kind == AST_EVIDENCE_KIND:
        return "high"
    if signal.signal_class == "maintainability":
        return "low"
    if signal.signal_class == "behavioral":
        return "medium"
    return "low"


def normalize(signal: Signal) -> Signal:
    """Return ``signal`` with a definite confidence; set values are kept."""
    if signal.confidence is not None:
        return signal
    return signal.with_confidence(infer_confidence(signal))


def classify(signal: Signal) -> GateTier:
    """Place a normalized signal into its gate tier."""
    if signal.confidence is None:
        raise InvariantViolation(f"signal {signal.id!r} reached the gate without a normalized confidence")
    if signal.confidence == "high" and signal.signal_class in BLOCKING_CLASSES:
        return "blocking"
    if signal.confidence == "low":
        return "filtered"
    return "advisory"


def gate(signals: list[Signal] | tuple[Signal, ...]) -> GatedSignals:
    """Normalize and triage ``signals``; each tier preserves input order."""
    normalized = tuple(normalize(signal) for signal in signals)
    tiers: dict[GateTier, list[Signal]] = {"blocking": [], "advisory": [], "filtered": []}
    scored: list[Signal] = []
    for signal in normalized:
        tier = classify(signal)
        tiers[tier].append(signal)
        if tier != "filtered":
            scored.append(signal)

    total = len(normalized)
    blocking = len(tiers["blocking"])
    stats = GateStats(
        total=total,
        blocking=blocking,
        advisory=len(tiers["advisory"]),
        filtered=len(tiers["filtered"]),
        blocking_ratio=blocking / total if total else 0.0,
    )
    return GatedSignals(
        blocking=tuple(tiers["blocking"]),
        advisory=tuple(tiers["advisory"]),
        filtered=tuple(tiers["filtered"]),
        all=normalized,
        stats=stats,
        scored=tuple(scored),
    )


def display_signals(gated: GatedSignals) -> tuple[Signal, ...]:
    """Signals worth showing by default: blocking first, then advisory."""
    return (*gated.blocking, *gated.advisory)


def detailed_signals(gated: GatedSignals) -> tuple[Signal, ...]:
    """Every signal, filtered ones last, for verbose output."""
    return (*gated.blocking, *gated.advisory, *gated.filtered)


def has_blocking_signals(gated: GatedSignals) -> bool:
    return bool(gated.blocking)


def format_gate_stats(stats: GateStats) -> str:
    """Short summary such as ``2 high-impact, 1 advisory (4 total)``."""
    parts: list[str] = []
    if stats.blocking:
        parts.append(f"{stats.blocking} high-impact")
    if stats.advisory:
        parts.append(f"{stats.advisory} advisory")
    if not parts:
        return f"no actionable signals ({stats.total} total)"
    return f"{', '.join(parts)} ({stats.total} total)"
