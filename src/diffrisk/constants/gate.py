"""Constants for confidence normalization and gating."""

from __future__ import annotations

SECURITY_ID_PREFIX: str = "sec-"

# Substrings in a signal id that imply a security-relevant detector.
SECURITY_ID_KEYWORDS: tuple[str, ...] = (
    "auth",
    "security",
    "password",
    "token",
    "secret",
    "permission",
    "credential",
)

AST_EVIDENCE_KIND: str = "ast"

BLOCKING_CLASSES: frozenset[str] = frozenset({"critical", "behavioral"})
