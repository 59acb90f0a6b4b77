"""Root exception type."""

from __future__ import annotations


class DiffRiskError(Exception):
    """Base class for all diffrisk errors."""
