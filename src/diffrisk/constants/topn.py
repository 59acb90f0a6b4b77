"""Constants for Top-N selection and rationale text."""

from __future__ import annotations

DEFAULT_TOP_N: int = 5
MAX_NEXT_CANDIDATES: int = 2

VERY_CLOSE_SCORE_GAP: float = 0.5
CLOSE_SCORE_GAP: float = 1.0

HIGH_CONFIDENCE_FACTOR_MIN: float = 0.7

NO_ISSUES_RATIONALE: str = "No issues to rank"
