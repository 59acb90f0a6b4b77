"""Pure suppression matching, specificity and resolution.

Resolution for a ``(signal_id, path)`` pair works in three steps:

1. collect every non-expired entry from both stores that matches;
2. if any local entry matched, drop all global matches (scope beats
   specificity);
3. pick the highest-specificity survivor, earliest entry on ties.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from fnmatch import fnmatchcase

from diffrisk.constants.suppressions import (
    DURATION_PATTERN,
    DURATION_UNIT_HOURS,
    SECURITY_SIGNAL_KEYWORDS,
    SECURITY_SIGNAL_PREFIXES,
    SPECIFICITY_CONCRETE_SEGMENT,
    SPECIFICITY_EXACT_PATH_BONUS,
    SPECIFICITY_PARTIAL_SEGMENT,
    SPECIFICITY_WILDCARD_SEGMENT,
)
from diffrisk.exceptions import SuppressionError
from diffrisk.model import SuppressionEntry, SuppressionMatch
from diffrisk.types import SuppressionScope
from diffrisk.utils.globs import glob_match, has_wildcard, normalize_path


def normalize_glob(file_glob: str | None) -> str:
    return normalize_path(file_glob) if file_glob else ""


def canonical_key(signal_id: str, file_glob: str | None) -> str:
    """Store uniqueness key: lower-cased id and normalized, lower-cased glob."""
    return f"{signal_id.strip().lower()}::{normalize_glob(file_glob).lower()}"


def signal_id_matches(pattern: str, signal_id: str) -> bool:
    """Match an exact id, ``*``, or ``prefix-*`` case-insensitively."""
    pattern = pattern.strip().lower()
    candidate = signal_id.strip().lower()
    if pattern == "*" or pattern == candidate:
        return True
    if pattern.endswith("*") and "*" not in pattern[:-1] and "?" not in pattern:
        return candidate.startswith(pattern[:-1])
    if has_wildcard(pattern):
        return fnmatchcase(candidate, pattern)
    return False


def specificity(file_glob: str | None) -> int:
    """Score how narrowly ``file_glob`` targets files.

    No glob scores 0.  Each ``*`` or ``**`` segment adds a little, each
    partially wild segment more, each concrete segment the most.  A glob
    without any wildcard is an exact path and outranks every wildcard glob.
    """
    normalized = normalize_glob(file_glob)
    if not normalized:
        return 0
    score = 0
    for segment in normalized.split("/"):
        if not segment:
            continue
        if segment in ("*", "**"):
            score += SPECIFICITY_WILDCARD_SEGMENT
        elif has_wildcard(segment):
            score += SPECIFICITY_PARTIAL_SEGMENT
        else:
            score += SPECIFICITY_CONCRETE_SEGMENT
    if not has_wildcard(normalized):
        score += SPECIFICITY_EXACT_PATH_BONUS
    return score


def entry_matches(entry: SuppressionEntry, signal_id: str, path: str, now: datetime) -> bool:
    if entry.is_expired(now):
        return False
    if not signal_id_matches(entry.signal_id, signal_id):
        return False
    if not entry.file_glob:
        return True
    return glob_match(path, entry.file_glob)


def collect_matches(
    signal_id: str,
    path: str,
    scoped_entries: list[tuple[SuppressionScope, list[SuppressionEntry]]],
    now: datetime,
) -> list[SuppressionMatch]:
    """Every matching entry across scopes, tagged with scope and position."""
    matches: list[SuppressionMatch] = []
    order = 0
    for scope, entries in scoped_entries:
        for entry in entries:
            if entry_matches(entry, signal_id, path, now):
                matches.append(
                    SuppressionMatch(
                        entry=entry,
                        scope=scope,
                        specificity=specificity(entry.file_glob),
                        order=order,
                    )
                )
            order += 1
    return matches


def resolve(
    signal_id: str,
    path: str,
    *,
    local: list[SuppressionEntry],
    global_: list[SuppressionEntry],
    now: datetime,
) -> SuppressionMatch | None:
    """Return the winning suppression for ``(signal_id, path)``, if any."""
    matches = collect_matches(signal_id, path, [("local", local), ("global", global_)], now)
    if not matches:
        return None
    if any(match.scope == "local" for match in matches):
        matches = [match for match in matches if match.scope == "local"]
    return min(matches, key=lambda match: (-match.specificity, match.order))


def is_security_signal(signal_id: str) -> bool:
    """Whether suppressing ``signal_id`` needs a reason and a bounded lifetime."""
    lowered = signal_id.strip().lower()
    if lowered.startswith(SECURITY_SIGNAL_PREFIXES):
        return True
    return any(keyword in lowered for keyword in SECURITY_SIGNAL_KEYWORDS)


def parse_duration(value: str) -> timedelta:
    """Parse ``<n>h``, ``<n>d``, ``<n>w`` or ``<n>m`` (30-day months)."""
    match = DURATION_PATTERN.match(value.strip().lower())
    if match is None:
        raise SuppressionError(f"Invalid duration {value!r}: expected a number followed by h, d, w or m")
    amount = int(match.group(1))
    if amount <= 0:
        raise SuppressionError(f"Invalid duration {value!r}: must be positive")
    return timedelta(hours=amount * DURATION_UNIT_HOURS[match.group(2)])
