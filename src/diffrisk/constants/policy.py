"""Constants for policy rules, profiles and action mappings."""

from __future__ import annotations

from typing import Any

VALID_RULE_SEVERITIES: frozenset[str] = frozenset({"blocker", "warning", "info"})
SEVERITY_ORDER: dict[str, int] = {"blocker": 3, "warning": 2, "info": 1}

VALID_ACTION_TYPES: frozenset[str] = frozenset({"test", "review", "check", "verify", "refactor", "document"})

VALID_PROFILES: frozenset[str] = frozenset({"minimal", "strict", "react", "vue", "angular", "backend"})
DEFAULT_PROFILE: str = "minimal"

CONFIG_FAIL_RULE_ID: str = "config-fail-threshold"
CONFIG_WARN_RULE_ID: str = "config-warn-threshold"

HEURISTIC_TEST_MIN_RISK: float = 7.0
HEURISTIC_REVIEW_MIN_BLAST: int = 10
HEURISTIC_DEFAULT_ACTION: str = "Review changes carefully before merge"
HEURISTIC_DEFAULT_PRIORITY: int = 10

HEURISTIC_SIGNAL_PRIORITY: int = 3

# Signal ids that map to a targeted follow-up when no rule action applies.
HEURISTIC_SIGNAL_ACTIONS: dict[str, tuple[str, str]] = {
    "react-effect-no-deps": ("check", "Add missing useEffect dependencies"),
    "angular-subscription-leak": ("check", "Add takeUntil or async pipe to prevent memory leaks"),
    "node-sync-op": ("refactor", "Replace sync operations with async versions"),
}

_RULE_CONDITION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "risk_gte": {"type": "number", "minimum": 0, "maximum": 10},
        "risk_lte": {"type": "number", "minimum": 0, "maximum": 10},
        "blast_radius_gte": {"type": "integer", "minimum": 0},
        "evidence_contains": {"type": "array", "items": {"type": "string"}},
        "evidence_tags": {"type": "array", "items": {"type": "string"}},
        "path_matches": {"type": "array", "items": {"type": "string"}},
        "path_excludes": {"type": "array", "items": {"type": "string"}},
        "signal_types": {"type": "array", "items": {"type": "string"}},
        "signal_classes": {
            "type": "array",
            "items": {"enum": ["critical", "behavioral", "maintainability"]},
        },
    },
}

_RULE_ACTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type", "text"],
    "additionalProperties": False,
    "properties": {
        "type": {"enum": sorted(VALID_ACTION_TYPES)},
        "text": {"type": "string", "minLength": 1},
        "command": {"type": "string"},
        "reviewers": {"type": "array", "items": {"type": "string"}},
        "priority": {"type": "integer"},
    },
}

RULES_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id", "when", "then"],
        "additionalProperties": False,
        "properties": {
            "id": {"type": "string", "minLength": 1},
            "description": {"type": "string"},
            "when": _RULE_CONDITION_SCHEMA,
            "then": {
                "type": "object",
                "required": ["severity"],
                "additionalProperties": False,
                "properties": {
                    "severity": {"enum": ["blocker", "warning", "info"]},
                    "actions": {"type": "array", "items": _RULE_ACTION_SCHEMA},
                },
            },
        },
    },
}

EXCEPTIONS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id", "paths"],
        "additionalProperties": False,
        "properties": {
            "id": {"type": "string", "minLength": 1},
            "paths": {"type": "array", "minItems": 1, "items": {"type": "string", "minLength": 1}},
            "until": {"type": "string"},
            "reason": {"type": "string"},
        },
    },
}

ACTION_MAPPINGS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["pattern"],
        "additionalProperties": False,
        "properties": {
            "pattern": {"type": "string", "minLength": 1},
            "commands": {"type": "array", "items": {"type": "string"}},
            "reviewers": {"type": "array", "items": {"type": "string"}},
            "notes": {"type": "string"},
        },
    },
}
