"""Durable suppression stores and resolution."""

from __future__ import annotations

from .manager import SuppressionListing, SuppressionManager, SuppressionSet
from .resolver import canonical_key, resolve, signal_id_matches, specificity
from .store import (
    InMemorySuppressionStore,
    JsonSuppressionStore,
    SuppressionStore,
    default_global_path,
    default_local_path,
)

__all__ = [
    "InMemorySuppressionStore",
    "JsonSuppressionStore",
    "SuppressionListing",
    "SuppressionManager",
    "SuppressionSet",
    "SuppressionStore",
    "canonical_key",
    "default_global_path",
    "default_local_path",
    "resolve",
    "signal_id_matches",
    "specificity",
]
