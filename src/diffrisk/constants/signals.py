"""Signal classes and the built-in signal id classification table."""

from __future__ import annotations

VALID_SIGNAL_CLASSES: frozenset[str] = frozenset({"critical", "behavioral", "maintainability"})
VALID_CONFIDENCES: frozenset[str] = frozenset({"high", "medium", "low"})

CLASS_LABELS: dict[str, str] = {
    "critical": "Critical",
    "behavioral": "Behavioral",
    "maintainability": "Maintainability",
}

# Detector ids whose class is fixed when the detector omits it.
SIGNAL_ID_CLASS: dict[str, str] = {
    # critical: security boundaries and data integrity
    "auth-boundary": "critical",
    "auth-middleware": "critical",
    "security-file": "critical",
    "permission-check": "critical",
    "sec-eval": "critical",
    "sec-innerhtml": "critical",
    "sec-sql-concat": "critical",
    "sec-hardcoded-secret": "critical",
    "sec-cors-wildcard": "critical",
    "payment-flow": "critical",
    "database-migration": "critical",
    "schema-change": "critical",
    "crypto-usage": "critical",
    # behavioral: runtime behaviour and side effects
    "network-fetch": "behavioral",
    "network-axios": "behavioral",
    "api-endpoint": "behavioral",
    "route-change": "behavioral",
    "state-mutation": "behavioral",
    "side-effect": "behavioral",
    "async-flow": "behavioral",
    "react-effect": "behavioral",
    "react-effect-deps": "behavioral",
    "react-state": "behavioral",
    "event-listener": "behavioral",
    "timer-usage": "behavioral",
    "storage-access": "behavioral",
    "env-access": "behavioral",
    "error-handling": "behavioral",
    "exports-changed": "behavioral",
    "public-api": "behavioral",
    # maintainability: size, complexity and hygiene
    "large-file": "maintainability",
    "complex-function": "maintainability",
    "deep-nesting": "maintainability",
    "long-function": "maintainability",
    "todo-comment": "maintainability",
    "console-log": "maintainability",
    "any-type": "maintainability",
    "ts-ignore": "maintainability",
    "magic-number": "maintainability",
    "duplicate-code": "maintainability",
    "low-test-ratio": "maintainability",
    "missing-tests": "maintainability",
}
