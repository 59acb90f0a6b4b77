"""Constants for suppression stores, matching and lifetimes."""

from __future__ import annotations

import re
from typing import Any

SUPPRESSIONS_VERSION: int = 1
LOCAL_SUPPRESSIONS_RELATIVE_PATH: str = ".diffrisk/suppressions.json"
GLOBAL_SUPPRESSIONS_RELATIVE_PATH: str = ".config/diffrisk/suppressions.json"
SUPPRESSIONS_TEMP_PREFIX: str = ".suppressions-"
SUPPRESSIONS_TEMP_SUFFIX: str = ".tmp"

SECURITY_SIGNAL_PREFIXES: tuple[str, ...] = (
    "sec-",
    "security-",
    "auth-",
    "xss-",
    "sqli-",
    "csrf-",
)
SECURITY_SIGNAL_KEYWORDS: tuple[str, ...] = (
    "injection",
    "credential",
    "password",
    "token",
    "secret",
    "vulnerability",
)
SECURITY_DEFAULT_EXPIRY_DAYS: int = 30

DURATION_PATTERN: re.Pattern[str] = re.compile(r"^(\d+)([hdwm])$")
DURATION_UNIT_HOURS: dict[str, int] = {
    "h": 1,
    "d": 24,
    "w": 24 * 7,
    "m": 24 * 30,
}

GLOB_WILDCARD_CHARS: frozenset[str] = frozenset("*?[{")

SPECIFICITY_WILDCARD_SEGMENT: int = 1
SPECIFICITY_PARTIAL_SEGMENT: int = 5
SPECIFICITY_CONCRETE_SEGMENT: int = 10
SPECIFICITY_EXACT_PATH_BONUS: int = 10_000

SUPPRESSION_SCOPES: tuple[str, ...] = ("local", "global")

SUPPRESSIONS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["version", "suppressions"],
    "properties": {
        "version": {"type": "integer", "const": SUPPRESSIONS_VERSION},
        "suppressions": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["signal_id", "created_at"],
                "properties": {
                    "signal_id": {"type": "string", "minLength": 1},
                    "file_glob": {"type": ["string", "null"]},
                    "reason": {"type": ["string", "null"]},
                    "created_at": {"type": "string", "minLength": 1},
                    "expires_at": {"type": ["string", "null"]},
                    "created_by": {"type": ["string", "null"]},
                },
            },
        },
    },
}
