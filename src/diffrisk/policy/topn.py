"""Top-N selection: rank engine results and explain the cut."""

from __future__ import annotations

from diffrisk.constants.topn import (
    CLOSE_SCORE_GAP,
    DEFAULT_TOP_N,
    HIGH_CONFIDENCE_FACTOR_MIN,
    MAX_NEXT_CANDIDATES,
    NO_ISSUES_RATIONALE,
    VERY_CLOSE_SCORE_GAP,
)
from diffrisk.model import (
    EvaluationResult,
    NextCandidate,
    RankedItem,
    RuleResult,
    SelectionReason,
    TopNResult,
)

_TIER_PRIMARY_REASONS: tuple[str, ...] = ("blocker severity", "warning severity", "highest remaining risk")
_UNGROUPED_PRIMARY_REASON = "highest risk score"


def rank_key(result: RuleResult) -> tuple[float, int, str]:
    """Risk descending, then blast radius descending, then path."""
    return (-result.file.risk_score, -result.file.blast_radius.total, result.file.path)


def selection_factors(result: RuleResult) -> tuple[str, ...]:
    file = result.file
    factors = [f"risk {file.risk_score:.1f}/10"]
    if file.blast_radius.total > 0:
        factors.append(f"{file.blast_radius.total} dependents")
    if file.breakdown.critical > 0:
        factors.append("critical signals")
    elif file.breakdown.behavioral > 0:
        factors.append("behavioral signals")
    if file.breakdown.confidence >= HIGH_CONFIDENCE_FACTOR_MIN:
        factors.append("high confidence")
    return tuple(factors)


def gap_label(score_gap: float) -> str:
    if score_gap < VERY_CLOSE_SCORE_GAP:
        return "very close in score"
    if score_gap < CLOSE_SCORE_GAP:
        return "close in score"
    return "lower risk score"


def _rationale(items: list[RankedItem], next_candidates: list[NextCandidate]) -> str:
    if not items:
        return NO_ISSUES_RATIONALE

    parts: list[str] = []
    if any(item.reason.primary in _TIER_PRIMARY_REASONS[:2] for item in items):
        parts.append("sorted by severity (blockers first), then by risk score")
    else:
        parts.append("sorted by risk score")

    highest = max(item.result.file.risk_score for item in items)
    if highest > 0:
        parts.append(f"highest risk: {highest:.1f}/10")

    if any(item.result.file.breakdown.critical > 0 for item in items):
        parts.append("includes critical boundary signals")
    elif any(item.result.file.breakdown.behavioral > 0 for item in items):
        parts.append("includes behavioral change signals")

    close = [candidate for candidate in next_candidates if "close" in candidate.gap_label]
    if close:
        parts.append(f"{len(close)} more file(s) with similar risk scores")
    return "; ".join(parts)


def select_top_n(
    evaluation: EvaluationResult,
    *,
    limit: int = DEFAULT_TOP_N,
    show_all: bool = False,
    min_risk: float = 0.0,
    group_by_severity: bool = True,
) -> TopNResult:
    """Pick the results worth showing first.

    Each severity tier is ordered by :func:`rank_key`.  Unless ``show_all`` is
    set, up to ``limit`` results are taken blockers first, then warnings,
    then infos.  With ``group_by_severity`` off the budget is filled purely
    by risk.
    """
    tiers = [
        sorted((r for r in tier if r.file.risk_score >= min_risk), key=rank_key)
        for tier in (evaluation.blockers, evaluation.warnings, evaluation.infos)
    ]
    ordered: list[tuple[RuleResult, str]] = [
        (result, _TIER_PRIMARY_REASONS[index]) for index, tier in enumerate(tiers) for result in tier
    ]
    if not group_by_severity:
        ordered = sorted(
            ((result, _UNGROUPED_PRIMARY_REASON) for result, _ in ordered),
            key=lambda pair: rank_key(pair[0]),
        )

    total = len(ordered)
    budget = total if show_all else max(0, limit)
    shown = ordered[:budget]

    items = [
        RankedItem(
            result=result,
            reason=SelectionReason(rank=rank, primary=primary, factors=selection_factors(result)),
        )
        for rank, (result, primary) in enumerate(shown, start=1)
    ]

    next_candidates: list[NextCandidate] = []
    if len(shown) < total:
        last_score = shown[-1][0].file.risk_score if shown else None
        for result, _ in ordered[len(shown) : len(shown) + MAX_NEXT_CANDIDATES]:
            gap = last_score - result.file.risk_score if last_score is not None else 0.0
            next_candidates.append(
                NextCandidate(
                    path=result.file.path,
                    risk_score=result.file.risk_score,
                    severity=result.severity,
                    gap_label=gap_label(gap),
                )
            )

    return TopNResult(
        items=tuple(items),
        total=total,
        hidden_count=total - len(shown),
        rationale=_rationale(items, next_candidates),
        next_candidates=tuple(next_candidates),
        limit=None if show_all else limit,
    )


def format_hidden_message(result: TopNResult) -> str | None:
    """``N more issue(s) hidden.`` plus the next candidate, or None."""
    if result.hidden_count == 0:
        return None
    message = f"{result.hidden_count} more issue(s) hidden."
    if result.next_candidates:
        candidate = result.next_candidates[0]
        message += f" Next: `{candidate.path}` ({candidate.risk_score:.1f}, {candidate.gap_label})"
    return message + " Use --show-all to see all."


def format_top_n_summary(result: TopNResult) -> str:
    if result.total == 0:
        return "No issues found"
    if result.is_limited:
        return f"Showing top {result.shown_count} of {result.total} issues"
    return f"{result.total} issue(s) found"


def format_detailed_rationale(result: TopNResult) -> str | None:
    """One ``rank) file: reason (factors)`` line per shown item."""
    if not result.items:
        return None
    lines: list[str] = []
    for item in result.items:
        name = item.result.file.path.rsplit("/", 1)[-1]
        factors = ", ".join(item.reason.factors[:2])
        lines.append(f"{item.reason.rank}) {name}: {item.reason.primary} ({factors})")
    return "\n".join(lines)
