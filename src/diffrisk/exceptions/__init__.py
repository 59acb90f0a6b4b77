"""Shared exception hierarchy for diffrisk."""

from __future__ import annotations

from .base import DiffRiskError
from .config import ConfigError
from .input import InputError
from .invariant import InvariantViolation
from .suppressions import SuppressionError

__all__ = [
    "ConfigError",
    "DiffRiskError",
    "InputError",
    "InvariantViolation",
    "SuppressionError",
]
