"""Class-based risk scoring for one file's gated signals."""

from __future__ import annotations

from collections import defaultdict

from diffrisk.constants.scoring import (
    CLASS_PRIORITY,
    CLASS_SCORE_CAPS,
    CLASS_WEIGHT_MULTIPLIERS,
    DEFAULT_BLOCKER_THRESHOLD,
    EVIDENCE_ERROR_MIN_WEIGHT,
    EVIDENCE_WARNING_MIN_WEIGHT,
    MAINTAINABILITY_CAP_MARGIN,
    MAX_RISK_SCORE,
    REASON_CHAIN_MAX_IDS,
    RISK_BAND_CRITICAL_MIN,
    RISK_BAND_HIGH_MIN,
    RISK_BAND_MEDIUM_MIN,
)
from diffrisk.constants.signals import CLASS_LABELS
from diffrisk.model import Evidence, GatedSignals, RiskScoreBreakdown, Signal
from diffrisk.types import RiskBand


def _score_class(signal: Signal) -> str:
    # Unclassified signals that survive the gate are scored as maintainability.
    return signal.signal_class or "maintainability"


def _effective_weight(signal: Signal) -> float:
    multiplier = CLASS_WEIGHT_MULTIPLIERS[_score_class(signal)]
    return max(0.0, min(1.0, signal.weight * multiplier))


def aggregate_class_weights(weights: list[float], cap: float) -> float:
    """Combine same-class weights with diminishing returns.

    ``cap * (1 - Π(1 - w))``: every extra signal raises the subtotal, each by
    less than the one before, and the result never exceeds ``cap``.
    """
    residual = 1.0
    for weight in weights:
        residual *= 1.0 - max(0.0, min(1.0, weight))
    return cap * (1.0 - residual)


def score_signals(
    gated: GatedSignals,
    *,
    blocker_threshold: float = DEFAULT_BLOCKER_THRESHOLD,
) -> RiskScoreBreakdown:
    """Score the non-filtered signals of one file on a 0-10 scale.

    A file with no critical and no behavioral contribution is clamped strictly
    below ``blocker_threshold``, so maintainability findings alone never block.
    """
    if blocker_threshold <= 0:
        raise ValueError(f"blocker_threshold must be positive, got {blocker_threshold}")

    by_class: dict[str, list[Signal]] = defaultdict(list)
    for signal in gated.scored:
        by_class[_score_class(signal)].append(signal)

    subtotals = {
        signal_class: aggregate_class_weights(
            [_effective_weight(signal) for signal in by_class.get(signal_class, [])],
            CLASS_SCORE_CAPS[signal_class],
        )
        for signal_class in CLASS_PRIORITY
    }

    total = round(max(0.0, min(MAX_RISK_SCORE, sum(subtotals.values()))), 2)
    if subtotals["critical"] == 0 and subtotals["behavioral"] == 0:
        total = min(total, max(0.0, blocker_threshold - MAINTAINABILITY_CAP_MARGIN))

    if by_class.get("critical"):
        max_severity = "blocker"
    elif by_class.get("behavioral"):
        max_severity = "warning"
    else:
        max_severity = "info"

    scored_count = len(gated.scored)
    high_count = sum(1 for signal in gated.scored if signal.confidence == "high")

    return RiskScoreBreakdown(
        critical=round(subtotals["critical"], 2),
        behavioral=round(subtotals["behavioral"], 2),
        maintainability=round(subtotals["maintainability"], 2),
        confidence=round(high_count / scored_count, 2) if scored_count else 0.0,
        total=total,
        max_severity=max_severity,
        signal_count=scored_count,
        reason_chain=build_reason_chain(
            by_class,
            subtotals,
            changed_signals=sum(1 for signal in gated.scored if signal.in_changed_range),
        ),
    )


def build_reason_chain(
    by_class: dict[str, list[Signal]],
    subtotals: dict[str, float],
    *,
    changed_signals: int = 0,
) -> tuple[str, ...]:
    """Render ``Class [category]: ids (+x.x)`` lines, class priority first.

    Within a class, categories are ranked by their share of the class subtotal.
    A trailing line counts the scored signals that sit on changed lines.
    """
    chain: list[str] = []
    for signal_class in CLASS_PRIORITY:
        signals = by_class.get(signal_class, [])
        subtotal = subtotals[signal_class]
        if not signals or subtotal <= 0:
            continue

        by_category: dict[str, list[Signal]] = defaultdict(list)
        for signal in signals:
            by_category[signal.category or "general"].append(signal)

        class_weight = sum(_effective_weight(signal) for signal in signals)
        ranked: list[tuple[float, str, list[Signal]]] = []
        for category, members in by_category.items():
            share = sum(_effective_weight(signal) for signal in members)
            contribution = subtotal * share / class_weight if class_weight else 0.0
            ranked.append((contribution, category, members))
        ranked.sort(key=lambda item: (-item[0], item[1]))

        label = CLASS_LABELS[signal_class]
        for contribution, category, members in ranked:
            ids = list(dict.fromkeys(signal.id for signal in members))[:REASON_CHAIN_MAX_IDS]
            chain.append(f"{label} [{category}]: {', '.join(ids)} (+{contribution:.1f})")
    if changed_signals:
        chain.append(f"Changed lines: {changed_signals} signal(s) in diff")
    return tuple(chain)


def risk_band(score: float) -> RiskBand:
    """Map a 0-10 risk score to a display band."""
    if score >= RISK_BAND_CRITICAL_MIN:
        return "CRITICAL"
    if score >= RISK_BAND_HIGH_MIN:
        return "HIGH"
    if score >= RISK_BAND_MEDIUM_MIN:
        return "MED"
    return "LOW"


def evidence_severity(weight: float) -> str:
    if weight >= EVIDENCE_ERROR_MIN_WEIGHT:
        return "error"
    if weight >= EVIDENCE_WARNING_MIN_WEIGHT:
        return "warning"
    return "info"


def build_evidence(signals: tuple[Signal, ...]) -> tuple[Evidence, ...]:
    """One evidence record per scored signal, in signal order."""
    return tuple(
        Evidence(
            message=signal.reason or signal.title or signal.id,
            severity=evidence_severity(signal.weight),
            tag=f"{signal.category}:{signal.id}",
            line=signal.lines[0] if signal.lines else None,
        )
        for signal in signals
    )
