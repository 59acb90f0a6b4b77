"""Policy entities: rules, exceptions, actions and evaluation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from diffrisk.model.entities import AnalyzedFile
from diffrisk.types import ActionType, JsonObject, RuleSeverity


@dataclass(frozen=True)
class RuleCondition:
    """Optional predicates of a rule's ``when`` block; unset fields always hold."""

    risk_gte: float | None = None
    risk_lte: float | None = None
    blast_radius_gte: int | None = None
    evidence_contains: tuple[str, ...] | None = None
    evidence_tags: tuple[str, ...] | None = None
    path_matches: tuple[str, ...] | None = None
    path_excludes: tuple[str, ...] | None = None
    signal_types: tuple[str, ...] | None = None
    signal_classes: tuple[str, ...] | None = None

    def to_dict(self) -> JsonObject:
        payload: JsonObject = {}
        for key, value in self.__dict__.items():
            if value is None:
                continue
            payload[key] = list(value) if isinstance(value, tuple) else value
        return payload


@dataclass(frozen=True)
class RuleAction:
    type: ActionType
    text: str
    command: str | None = None
    reviewers: tuple[str, ...] = ()
    priority: int = 50

    def to_dict(self) -> JsonObject:
        payload: JsonObject = {"type": self.type, "text": self.text, "priority": self.priority}
        if self.command is not None:
            payload["command"] = self.command
        if self.reviewers:
            payload["reviewers"] = list(self.reviewers)
        return payload


@dataclass(frozen=True)
class Rule:
    id: str
    when: RuleCondition
    severity: RuleSeverity
    # None means "derive actions"; an empty tuple means "no actions".
    actions: tuple[RuleAction, ...] | None = None
    description: str = ""


@dataclass(frozen=True)
class PolicyException:
    """A time-bound bypass of every rule for matching paths."""

    id: str
    paths: tuple[str, ...]
    until: datetime | None = None
    reason: str | None = None


@dataclass(frozen=True)
class ActionMapping:
    """Path-pattern driven follow-ups attached to matching files."""

    pattern: str
    commands: tuple[str, ...] = ()
    reviewers: tuple[str, ...] = ()
    notes: str | None = None


@dataclass(frozen=True)
class RuleResult:
    rule_id: str
    severity: RuleSeverity
    file: AnalyzedFile
    actions: tuple[RuleAction, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "severity": self.severity,
            "path": self.file.path,
            "risk_score": self.file.risk_score,
            "blast_radius": self.file.blast_radius.total,
            "actions": [action.to_dict() for action in self.actions],
        }


@dataclass(frozen=True)
class EvaluationResult:
    blockers: tuple[RuleResult, ...]
    warnings: tuple[RuleResult, ...]
    infos: tuple[RuleResult, ...]
    exit_code: int
    excepted: tuple[str, ...] = ()

    @property
    def results(self) -> tuple[RuleResult, ...]:
        return (*self.blockers, *self.warnings, *self.infos)

    def to_dict(self) -> dict[str, Any]:
        return {
            "blockers": [result.to_dict() for result in self.blockers],
            "warnings": [result.to_dict() for result in self.warnings],
            "infos": [result.to_dict() for result in self.infos],
            "exit_code": self.exit_code,
            "excepted": list(self.excepted),
        }


@dataclass(frozen=True)
class SelectionReason:
    rank: int
    primary: str
    factors: tuple[str, ...] = ()

    def to_dict(self) -> JsonObject:
        return {"rank": self.rank, "primary": self.primary, "factors": list(self.factors)}


@dataclass(frozen=True)
class RankedItem:
    result: RuleResult
    reason: SelectionReason

    def to_dict(self) -> dict[str, Any]:
        return {**self.result.to_dict(), "selection": self.reason.to_dict()}


@dataclass(frozen=True)
class NextCandidate:
    path: str
    risk_score: float
    severity: RuleSeverity
    gap_label: str

    def to_dict(self) -> JsonObject:
        return {
            "path": self.path,
            "risk_score": self.risk_score,
            "severity": self.severity,
            "gap_label": self.gap_label,
        }


@dataclass(frozen=True)
class TopNResult:
    items: tuple[RankedItem, ...]
    total: int
    hidden_count: int
    rationale: str
    next_candidates: tuple[NextCandidate, ...] = field(default=())
    limit: int | None = None

    @property
    def shown_count(self) -> int:
        return len(self.items)

    @property
    def is_limited(self) -> bool:
        return self.hidden_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "hidden_count": self.hidden_count,
            "rationale": self.rationale,
            "next_candidates": [candidate.to_dict() for candidate in self.next_candidates],
            "limit": self.limit,
        }
