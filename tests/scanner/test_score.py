"""Tests for class-based risk scoring."""

from __future__ import annotations

import pytest

from diffrisk.model import Signal
from diffrisk.scanner.gate import gate
from diffrisk.scanner.score import (
    aggregate_class_weights,
    build_evidence,
    risk_band,
    score_signals,
)


def _signal(
    signal_id: str,
    signal_class: str | None,
    weight: float,
    *,
    confidence: str = "high",
    category: str = "general",
    reason: str = "",
) -> Signal:
    return Signal(
        id=signal_id,
        signal_class=signal_class,  # type: ignore[arg-type]
        category=category,
        weight=weight,
        confidence=confidence,  # type: ignore[arg-type]
        reason=reason,
        lines=(12,),
    )


def test_aggregation_has_diminishing_returns() -> None:
    one = aggregate_class_weights([0.5], 3.0)
    two = aggregate_class_weights([0.5, 0.5], 3.0)
    three = aggregate_class_weights([0.5, 0.5, 0.5], 3.0)

    assert one < two < three < 3.0
    assert (two - one) > (three - two)


def test_aggregation_never_exceeds_cap() -> None:
    assert aggregate_class_weights([1.0, 1.0, 1.0], 5.0) == pytest.approx(5.0)
    assert aggregate_class_weights([], 5.0) == 0.0


def test_score_combines_classes_and_clamps() -> None:
    gated = gate([_signal("auth-boundary", "critical", 1.0), _signal("network-fetch", "behavioral", 1.0)])

    breakdown = score_signals(gated)

    assert breakdown.critical == pytest.approx(5.0)
    assert breakdown.behavioral == pytest.approx(3.0)
    assert breakdown.total == pytest.approx(8.0)
    assert breakdown.max_severity == "blocker"
    assert breakdown.confidence == 1.0
    assert breakdown.signal_count == 2


@pytest.mark.parametrize("threshold", [0.5, 1.0, 3.0, 8.0])
def test_maintainability_only_never_reaches_blocker_threshold(threshold: float) -> None:
    signals = [_signal(f"m{index}", "maintainability", 1.0) for index in range(30)]

    breakdown = score_signals(gate(signals), blocker_threshold=threshold)

    assert breakdown.critical == 0
    assert breakdown.behavioral == 0
    assert breakdown.total < threshold
    assert breakdown.max_severity == "info"


def test_unclassified_signals_score_as_maintainability() -> None:
    gated = gate([_signal("custom-check", None, 0.8, confidence="medium")])

    breakdown = score_signals(gated)

    assert breakdown.maintainability > 0
    assert breakdown.critical == 0
    assert breakdown.behavioral == 0


def test_filtered_signals_do_not_score() -> None:
    gated = gate([_signal("auth-boundary", "critical", 1.0, confidence="low")])

    breakdown = score_signals(gated)

    assert breakdown.total == 0.0
    assert breakdown.signal_count == 0
    assert breakdown.reason_chain == ()


def test_score_rejects_non_positive_threshold() -> None:
    with pytest.raises(ValueError):
        score_signals(gate([]), blocker_threshold=0)


def test_reason_chain_groups_by_class_then_category() -> None:
    gated = gate(
        [
            _signal("network-fetch", "behavioral", 0.6, category="network"),
            _signal("auth-boundary", "critical", 0.4, category="security"),
            _signal("network-axios", "behavioral", 0.3, category="network"),
            _signal("react-state", "behavioral", 0.2, category="state", confidence="medium"),
        ]
    )

    chain = score_signals(gated).reason_chain

    assert chain[0].startswith("Critical [security]: auth-boundary (+")
    assert chain[1].startswith("Behavioral [network]: network-fetch, network-axios (+")
    assert chain[2].startswith("Behavioral [state]: react-state (+")


def test_risk_band_thresholds() -> None:
    assert risk_band(8.0) == "CRITICAL"
    assert risk_band(6.0) == "HIGH"
    assert risk_band(3.0) == "MED"
    assert risk_band(2.99) == "LOW"


def test_build_evidence_uses_reason_and_first_line() -> None:
    signal = _signal("side-effect", "behavioral", 0.75, reason="Writes to global state", category="effects")

    evidence = build_evidence((signal,))

    assert evidence[0].message == "Writes to global state"
    assert evidence[0].severity == "error"
    assert evidence[0].tag == "effects:side-effect"
    assert evidence[0].line == 12


def test_reason_chain_counts_signals_on_changed_lines() -> None:
    untouched = Signal(
        id="large-file",
        signal_class="maintainability",
        category="size",
        weight=0.5,
        confidence="high",
        in_changed_range=False,
    )
    gated = gate([_signal("network-fetch", "behavioral", 0.6), _signal("auth-boundary", "critical", 0.4), untouched])

    chain = score_signals(gated).reason_chain

    assert chain[-1] == "Changed lines: 2 signal(s) in diff"
    assert not any(line.startswith("Changed lines") for line in score_signals(gate([untouched])).reason_chain)
