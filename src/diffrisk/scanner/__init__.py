"""Risk evaluation pipeline package."""

from __future__ import annotations

from typing import Any

__all__ = ["evaluate_snapshot"]


def __getattr__(name: str) -> Any:
    """Lazily expose the orchestrator to avoid import cycles at package import time."""
    if name == "evaluate_snapshot":
        from .orchestrator import evaluate_snapshot

        return evaluate_snapshot
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
