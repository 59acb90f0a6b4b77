"""Stable validation error codes and allowed-key sets for config validation."""

from __future__ import annotations

CFG001: str = "CFG001"  # config file not found (explicit --config)
CFG002: str = "CFG002"  # invalid YAML parse
CFG003: str = "CFG003"  # top-level value is not a mapping
CFG004: str = "CFG004"  # unknown key
CFG005: str = "CFG005"  # invalid value type
CFG006: str = "CFG006"  # invalid enum value
CFG007: str = "CFG007"  # value out of range
CFG008: str = "CFG008"  # contradictory thresholds
CFG009: str = "CFG009"  # invalid nested mapping
CFG010: str = "CFG010"  # root directory not found
CFG011: str = "CFG011"  # rule schema violation
CFG012: str = "CFG012"  # exception schema violation
CFG013: str = "CFG013"  # duplicate rule or exception id
CFG014: str = "CFG014"  # unparseable exception `until`
CFG015: str = "CFG015"  # action mapping schema violation
CFG016: str = "CFG016"  # glob pattern that does not compile

ALLOWED_CONFIG_KEYS: frozenset[str] = frozenset(
    {
        "version",
        "profile",
        "thresholds",
        "top_n",
        "rules",
        "exceptions",
        "actions",
        "blast_radius",
        "cache",
        "suppressions",
        "ignore",
    }
)
ALLOWED_THRESHOLD_KEYS: frozenset[str] = frozenset({"fail", "warn"})
ALLOWED_ACTIONS_KEYS: frozenset[str] = frozenset({"mapping"})
ALLOWED_BLAST_RADIUS_KEYS: frozenset[str] = frozenset({"mode"})
ALLOWED_CACHE_KEYS: frozenset[str] = frozenset({"enabled", "dir", "max_age_hours", "max_entries"})
ALLOWED_SUPPRESSIONS_KEYS: frozenset[str] = frozenset({"local_path"})
ALLOWED_IGNORE_KEYS: frozenset[str] = frozenset({"patterns", "include_tests", "include_config", "override_defaults"})
