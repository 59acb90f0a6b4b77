"""Core data models for diffrisk."""

from .entities import (
    AnalyzedFile,
    BlastRadiusResult,
    Evidence,
    GatedSignals,
    GateStats,
    RiskScoreBreakdown,
    Signal,
    SuppressedSignal,
)
from .policy import (
    ActionMapping,
    EvaluationResult,
    NextCandidate,
    PolicyException,
    RankedItem,
    Rule,
    RuleAction,
    RuleCondition,
    RuleResult,
    SelectionReason,
    TopNResult,
)
from .suppressions import SuppressionEntry, SuppressionMatch

__all__ = [
    "ActionMapping",
    "AnalyzedFile",
    "BlastRadiusResult",
    "EvaluationResult",
    "Evidence",
    "GateStats",
    "GatedSignals",
    "NextCandidate",
    "PolicyException",
    "RankedItem",
    "RiskScoreBreakdown",
    "Rule",
    "RuleAction",
    "RuleCondition",
    "RuleResult",
    "SelectionReason",
    "Signal",
    "SuppressedSignal",
    "SuppressionEntry",
    "SuppressionMatch",
    "TopNResult",
]
