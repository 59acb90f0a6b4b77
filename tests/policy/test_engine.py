"""Tests for rule matching, exceptions, dedup and exit codes."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from diffrisk.model import (
    AnalyzedFile,
    BlastRadiusResult,
    Evidence,
    PolicyException,
    RiskScoreBreakdown,
    Rule,
    RuleAction,
    RuleCondition,
    RuleResult,
    Signal,
)
from diffrisk.policy.engine import (
    condition_matches,
    dedupe_results,
    effective_blocker_threshold,
    evaluate_rules,
    exception_applies,
)
from diffrisk.scanner.gate import gate

NOW = datetime(2026, 6, 1, tzinfo=UTC)


def _file(
    path: str,
    risk: float,
    *,
    blast: int = 0,
    signals: tuple[Signal, ...] = (),
    evidence: tuple[Evidence, ...] = (),
    reason_chain: tuple[str, ...] = (),
) -> AnalyzedFile:
    return AnalyzedFile(
        path=path,
        risk_score=risk,
        risk_band="LOW",
        breakdown=RiskScoreBreakdown(
            critical=0.0,
            behavioral=0.0,
            maintainability=0.0,
            confidence=0.0,
            total=risk,
            reason_chain=reason_chain,
        ),
        gated=gate(signals),
        blast_radius=BlastRadiusResult(
            direct=tuple(f"dep{index}.ts" for index in range(blast)),
            indirect=(),
            total=blast,
            confidence="medium",
            confidence_reason="test",
        ),
        evidence=evidence,
    )


def _rule(rule_id: str, severity: str, **when: object) -> Rule:
    return Rule(id=rule_id, when=RuleCondition(**when), severity=severity, actions=())  # type: ignore[arg-type]


def test_empty_condition_always_matches() -> None:
    assert condition_matches(RuleCondition(), _file("a.ts", 0.0))


def test_risk_and_blast_bounds() -> None:
    file = _file("a.ts", 6.5, blast=12)

    assert condition_matches(RuleCondition(risk_gte=6.5, risk_lte=7.0, blast_radius_gte=12), file)
    assert not condition_matches(RuleCondition(risk_gte=6.6), file)
    assert not condition_matches(RuleCondition(risk_lte=6.4), file)
    assert not condition_matches(RuleCondition(blast_radius_gte=13), file)


def test_evidence_matching_is_case_insensitive_any_of() -> None:
    file = _file(
        "a.ts",
        2.0,
        evidence=(Evidence(message="Writes to Global state", severity="warning", tag="effects:side-effect"),),
        reason_chain=("Maintainability [size]: large-file (+0.3)",),
    )

    assert condition_matches(RuleCondition(evidence_contains=("nothing", "global STATE")), file)
    assert condition_matches(RuleCondition(evidence_contains=("LARGE-FILE",)), file)
    assert condition_matches(RuleCondition(evidence_tags=("side-effect",)), file)
    assert not condition_matches(RuleCondition(evidence_tags=("react-effect",)), file)


def test_path_include_and_exclude() -> None:
    file = _file("src/core/store.ts", 1.0)

    assert condition_matches(RuleCondition(path_matches=("src/core/**",)), file)
    assert not condition_matches(RuleCondition(path_matches=("src/ui/**",)), file)
    assert not condition_matches(RuleCondition(path_matches=("src/**",), path_excludes=("**/store.ts",)), file)


def test_signal_type_and_class_membership() -> None:
    signals = (
        Signal(id="network-fetch", signal_class="behavioral", category="net", weight=0.5, confidence="medium"),
        Signal(id="ghost", signal_class="critical", category="x", weight=0.5, confidence="low"),
    )
    file = _file("a.ts", 2.0, signals=signals)

    assert condition_matches(RuleCondition(signal_types=("NETWORK-FETCH",)), file)
    assert condition_matches(RuleCondition(signal_classes=("behavioral",)), file)
    # Filtered signals take no part in matching.
    assert not condition_matches(RuleCondition(signal_types=("ghost",)), file)
    assert not condition_matches(RuleCondition(signal_classes=("critical",)), file)


def test_dedupe_keeps_highest_severity_per_file() -> None:
    file = _file("a.ts", 9.0)
    results = [
        RuleResult(rule_id="w", severity="warning", file=file),
        RuleResult(rule_id="b1", severity="blocker", file=file),
        RuleResult(rule_id="b2", severity="blocker", file=file),
        RuleResult(rule_id="i", severity="info", file=_file("b.ts", 1.0)),
    ]

    deduped = dedupe_results(results)

    assert [(result.rule_id, result.file.path) for result in deduped] == [("b1", "a.ts"), ("i", "b.ts")]


def test_exit_code_follows_blockers() -> None:
    rules = (_rule("block", "blocker", risk_gte=8.0), _rule("warn", "warning", risk_gte=5.0))

    failing = evaluate_rules([_file("a.ts", 8.5), _file("b.ts", 5.5)], rules, now=NOW)
    passing = evaluate_rules([_file("b.ts", 5.5)], rules, now=NOW)

    assert failing.exit_code == 1
    assert [r.rule_id for r in failing.blockers] == ["block"]
    assert [r.rule_id for r in failing.warnings] == ["warn"]
    assert passing.exit_code == 0
    assert passing.blockers == ()


def test_each_file_counts_once() -> None:
    rules = (
        _rule("warn", "warning", risk_gte=1.0),
        _rule("block", "blocker", risk_gte=1.0),
        _rule("info", "info"),
    )

    result = evaluate_rules([_file("a.ts", 9.0)], rules, now=NOW)

    assert len(result.results) == 1
    assert result.blockers[0].rule_id == "block"


def test_exceptions_bypass_until_expiry() -> None:
    rules = (_rule("block", "blocker", risk_gte=1.0),)
    active = PolicyException(id="freeze", paths=("legacy/**",), until=NOW + timedelta(days=1))
    expired = PolicyException(id="old", paths=("legacy/**",), until=NOW - timedelta(seconds=1))

    bypassed = evaluate_rules([_file("legacy/a.ts", 9.0)], rules, exceptions=(active,), now=NOW)
    enforced = evaluate_rules([_file("legacy/a.ts", 9.0)], rules, exceptions=(expired,), now=NOW)

    assert bypassed.exit_code == 0
    assert bypassed.excepted == ("legacy/a.ts",)
    assert enforced.exit_code == 1


def test_exception_without_until_never_expires() -> None:
    exception = PolicyException(id="forever", paths=("a.ts",))

    assert exception_applies(exception, "a.ts", datetime(2999, 1, 1, tzinfo=UTC))
    assert not exception_applies(exception, "b.ts", NOW)


def test_rule_actions_override_mappings() -> None:
    actions = (RuleAction("document", "Update the changelog"),)
    rules = (Rule(id="doc", when=RuleCondition(), severity="info", actions=actions),)

    result = evaluate_rules([_file("src/auth/a.ts", 1.0)], rules, now=NOW)

    assert result.infos[0].actions == actions


@pytest.mark.parametrize(
    ("rules", "expected"),
    [
        ((), 8.0),
        ((_rule("w", "warning", risk_gte=2.0),), 8.0),
        ((_rule("b", "blocker", risk_gte=6.5), _rule("c", "blocker", risk_gte=9.0)), 6.5),
        ((_rule("b", "blocker", blast_radius_gte=10),), 8.0),
    ],
)
def test_effective_blocker_threshold(rules: tuple[Rule, ...], expected: float) -> None:
    assert effective_blocker_threshold(rules) == expected
