"""Suppression command exceptions."""

from __future__ import annotations

from diffrisk.exceptions.base import DiffRiskError


class SuppressionError(DiffRiskError, ValueError):
    """Raised when a suppression command is rejected."""
