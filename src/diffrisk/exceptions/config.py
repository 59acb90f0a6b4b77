"""Configuration-related exceptions."""

from __future__ import annotations

from diffrisk.exceptions.base import DiffRiskError


class ConfigError(DiffRiskError, ValueError):
    """Raised when config, rules, exceptions or patterns are invalid."""
