"""Internal invariant failures."""

from __future__ import annotations

from diffrisk.exceptions.base import DiffRiskError


class InvariantViolation(DiffRiskError, RuntimeError):
    """Raised when data reaches a stage that its construction should have prevented."""
