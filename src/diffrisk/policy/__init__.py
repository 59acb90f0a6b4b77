"""Policy rules, exceptions, actions and Top-N selection."""

from __future__ import annotations

from .engine import condition_matches, effective_blocker_threshold, evaluate_rules
from .profiles import compose_rules
from .topn import select_top_n

__all__ = [
    "compose_rules",
    "condition_matches",
    "effective_blocker_threshold",
    "evaluate_rules",
    "select_top_n",
]
