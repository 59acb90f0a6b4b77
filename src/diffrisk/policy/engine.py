"""Policy rule engine: match rules against analyzed files and tally results."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from diffrisk.constants.policy import SEVERITY_ORDER
from diffrisk.constants.scoring import DEFAULT_BLOCKER_THRESHOLD
from diffrisk.model import (
    ActionMapping,
    AnalyzedFile,
    EvaluationResult,
    PolicyException,
    Rule,
    RuleCondition,
    RuleResult,
)
from diffrisk.policy.actions import actions_for
from diffrisk.utils.globs import match_any

logger = logging.getLogger(__name__)


def _any_contains(haystacks: list[str], needles: tuple[str, ...]) -> bool:
    lowered = [text.lower() for text in haystacks]
    return any(needle.lower() in text for needle in needles for text in lowered)


def condition_matches(condition: RuleCondition, file: AnalyzedFile) -> bool:
    """AND of every set predicate; an unset predicate always holds."""
    if condition.risk_gte is not None and file.risk_score < condition.risk_gte:
        return False
    if condition.risk_lte is not None and file.risk_score > condition.risk_lte:
        return False
    if condition.blast_radius_gte is not None and file.blast_radius.total < condition.blast_radius_gte:
        return False

    if condition.evidence_contains is not None:
        texts = [item.message for item in file.evidence] + list(file.breakdown.reason_chain)
        if not _any_contains(texts, condition.evidence_contains):
            return False

    if condition.evidence_tags is not None:
        tags = [item.tag for item in file.evidence]
        if not _any_contains(tags, condition.evidence_tags):
            return False

    if condition.path_matches is not None and not match_any(file.path, condition.path_matches):
        return False
    if condition.path_excludes is not None and match_any(file.path, condition.path_excludes):
        return False

    if condition.signal_types is not None:
        wanted = {value.lower() for value in condition.signal_types}
        if not any(signal_id.lower() in wanted for signal_id in file.signal_ids):
            return False

    if condition.signal_classes is not None:
        wanted_classes = set(condition.signal_classes)
        if not any(signal_class in wanted_classes for signal_class in file.signal_classes):
            return False

    return True


def exception_applies(exception: PolicyException, path: str, now: datetime) -> bool:
    if exception.until is not None and exception.until <= now:
        return False
    return match_any(path, exception.paths)


def find_exception(exceptions: tuple[PolicyException, ...], path: str, now: datetime) -> PolicyException | None:
    for exception in exceptions:
        if exception_applies(exception, path, now):
            return exception
    return None


def effective_blocker_threshold(rules: tuple[Rule, ...]) -> float:
    """Lowest risk floor among blocker rules, else the default threshold."""
    floors = [rule.when.risk_gte for rule in rules if rule.severity == "blocker" and rule.when.risk_gte is not None]
    floors = [floor for floor in floors if floor > 0]
    return min(floors) if floors else DEFAULT_BLOCKER_THRESHOLD


def dedupe_results(results: list[RuleResult]) -> list[RuleResult]:
    """Keep one result per file: the worst severity, first rule on ties."""
    best: dict[str, RuleResult] = {}
    for result in results:
        current = best.get(result.file.path)
        if current is None or SEVERITY_ORDER[result.severity] > SEVERITY_ORDER[current.severity]:
            best[result.file.path] = result
    return list(best.values())


def evaluate_rules(
    files: list[AnalyzedFile] | tuple[AnalyzedFile, ...],
    rules: tuple[Rule, ...],
    *,
    exceptions: tuple[PolicyException, ...] = (),
    action_mappings: tuple[ActionMapping, ...] = (),
    now: datetime | None = None,
) -> EvaluationResult:
    """Evaluate ``rules`` against ``files`` and tally deduplicated results.

    Files covered by an active exception are skipped entirely.  The exit code
    is 1 when at least one file ends up as a blocker.
    """
    now = now or datetime.now(UTC)
    raw_results: list[RuleResult] = []
    excepted: list[str] = []

    for file in files:
        exception = find_exception(exceptions, file.path, now)
        if exception is not None:
            logger.info("Exception %s bypasses rules for %s", exception.id, file.path)
            excepted.append(file.path)
            continue
        for rule in rules:
            if not condition_matches(rule.when, file):
                continue
            raw_results.append(
                RuleResult(
                    rule_id=rule.id,
                    severity=rule.severity,
                    file=file,
                    actions=actions_for(file, rule.actions, action_mappings),
                )
            )

    deduped = dedupe_results(raw_results)
    blockers = tuple(result for result in deduped if result.severity == "blocker")
    warnings = tuple(result for result in deduped if result.severity == "warning")
    infos = tuple(result for result in deduped if result.severity == "info")
    return EvaluationResult(
        blockers=blockers,
        warnings=warnings,
        infos=infos,
        exit_code=1 if blockers else 0,
        excepted=tuple(excepted),
    )
