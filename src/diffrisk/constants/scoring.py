"""Constants for class-based risk scoring and severity bands."""

from __future__ import annotations

MAX_RISK_SCORE: float = 10.0

# Upper bound each class subtotal approaches as evidence accumulates.
CLASS_SCORE_CAPS: dict[str, float] = {
    "critical": 5.0,
    "behavioral": 3.0,
    "maintainability": 1.0,
}

# Applied to each weight before aggregation.
CLASS_WEIGHT_MULTIPLIERS: dict[str, float] = {
    "critical": 1.5,
    "behavioral": 1.0,
    "maintainability": 0.5,
}

CLASS_PRIORITY: tuple[str, ...] = ("critical", "behavioral", "maintainability")

DEFAULT_BLOCKER_THRESHOLD: float = 8.0

# Gap kept below the blocker threshold for maintainability-only files.
MAINTAINABILITY_CAP_MARGIN: float = 0.01

REASON_CHAIN_MAX_IDS: int = 3

RISK_BAND_CRITICAL_MIN: float = 8.0
RISK_BAND_HIGH_MIN: float = 6.0
RISK_BAND_MEDIUM_MIN: float = 3.0

EVIDENCE_ERROR_MIN_WEIGHT: float = 0.7
EVIDENCE_WARNING_MIN_WEIGHT: float = 0.4
