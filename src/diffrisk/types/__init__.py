"""Shared type aliases and typed payloads."""

from __future__ import annotations

from .cache import CacheEntryPayload, CacheKeyComponents, CacheStats
from .common import (
    ActionType,
    BlastRadiusMode,
    Confidence,
    GateTier,
    IgnoreSource,
    JsonObject,
    JsonScalar,
    JsonValue,
    ProfileName,
    RiskBand,
    RuleSeverity,
    SignalClass,
    SuppressionScope,
)
from .suppressions import SuppressionEntryPayload, SuppressionFilePayload, SuppressionStats

__all__ = [
    "ActionType",
    "BlastRadiusMode",
    "CacheEntryPayload",
    "CacheKeyComponents",
    "CacheStats",
    "Confidence",
    "GateTier",
    "IgnoreSource",
    "JsonObject",
    "JsonScalar",
    "JsonValue",
    "ProfileName",
    "RiskBand",
    "RuleSeverity",
    "SignalClass",
    "SuppressionEntryPayload",
    "SuppressionFilePayload",
    "SuppressionScope",
    "SuppressionStats",
]
