"""Which changed files are left out of evaluation, and why.

Sources are checked in a fixed order: always-ignored paths first, then
test and config files unless included, then the default generated/asset
patterns unless overridden, then user patterns from ``ignore.patterns``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from diffrisk.constants.ignore import (
    ALWAYS_IGNORE,
    CONFIG_PATTERNS,
    DEFAULT_IGNORE,
    IGNORE_REASONS,
    TEST_PATTERNS,
)
from diffrisk.types import IgnoreSource
from diffrisk.utils.globs import glob_match, normalize_path


@dataclass(frozen=True)
class IgnoreSettings:
    patterns: tuple[str, ...] = ()
    include_tests: bool = False
    include_config: bool = False
    override_defaults: bool = False


@dataclass(frozen=True)
class IgnoreExplanation:
    path: str
    source: IgnoreSource
    pattern: str
    reason: str
    how_to_include: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "source": self.source,
            "pattern": self.pattern,
            "reason": self.reason,
            "how_to_include": self.how_to_include,
        }


def _sources(settings: IgnoreSettings) -> list[tuple[IgnoreSource, tuple[str, ...]]]:
    sources: list[tuple[IgnoreSource, tuple[str, ...]]] = [("always", ALWAYS_IGNORE)]
    if not settings.include_tests:
        sources.append(("test", TEST_PATTERNS))
    if not settings.include_config:
        sources.append(("config", CONFIG_PATTERNS))
    if not settings.override_defaults:
        sources.append(("default", DEFAULT_IGNORE))
    sources.append(("user", settings.patterns))
    return sources


def build_ignore_list(settings: IgnoreSettings | None = None) -> tuple[str, ...]:
    """Every active pattern, in matching order."""
    settings = settings or IgnoreSettings()
    return tuple(pattern for _, patterns in _sources(settings) for pattern in patterns)


def explain_ignore(path: str, settings: IgnoreSettings | None = None) -> IgnoreExplanation | None:
    """The first source and pattern that exclude ``path``, or None if it is evaluated."""
    settings = settings or IgnoreSettings()
    normalized = normalize_path(path)
    for source, patterns in _sources(settings):
        for pattern in patterns:
            if glob_match(normalized, pattern):
                reason, how_to_include = IGNORE_REASONS[source]
                return IgnoreExplanation(
                    path=normalized,
                    source=source,
                    pattern=pattern,
                    reason=reason,
                    how_to_include=how_to_include,
                )
    return None

