"""Exceptions for malformed evaluation input."""

from __future__ import annotations

from diffrisk.exceptions.base import DiffRiskError


class InputError(DiffRiskError, ValueError):
    """Raised when a signal snapshot from the detector layer is malformed."""
