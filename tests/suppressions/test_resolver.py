"""Tests for suppression matching and resolution."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from diffrisk.exceptions import SuppressionError
from diffrisk.model import SuppressionEntry
from diffrisk.suppressions.resolver import (
    canonical_key,
    is_security_signal,
    parse_duration,
    resolve,
    signal_id_matches,
    specificity,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


def _entry(signal_id: str, file_glob: str | None = None, **kwargs: object) -> SuppressionEntry:
    return SuppressionEntry(
        signal_id=signal_id,
        created_at=NOW - timedelta(days=1),
        file_glob=file_glob,
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.mark.parametrize(
    ("pattern", "signal_id", "expected"),
    [
        ("large-file", "large-file", True),
        ("Large-File", "large-file", True),
        ("*", "anything", True),
        ("react-*", "react-effect-no-deps", True),
        ("react-*", "preact-hooks", False),
        ("large-file", "large-files", False),
    ],
)
def test_signal_id_matches(pattern: str, signal_id: str, expected: bool) -> None:
    assert signal_id_matches(pattern, signal_id) is expected


def test_specificity_ordering() -> None:
    assert specificity(None) == 0
    assert specificity("**") < specificity("src/**")
    assert specificity("src/**") < specificity("src/auth/**")
    assert specificity("src/auth/**") < specificity("src/auth/*.ts")
    assert specificity("src/auth/*.ts") < specificity("src/auth/login.ts")


def test_canonical_key_normalizes_case_and_separators() -> None:
    assert canonical_key(" Large-File ", ".\\src\\Auth\\**") == "large-file::src/auth/**"
    assert canonical_key("x", None) == "x::"


def test_local_entry_beats_more_specific_global() -> None:
    local = [_entry("large-file", reason="local")]
    global_ = [_entry("large-file", "src/auth/login.ts", reason="global")]

    match = resolve("large-file", "src/auth/login.ts", local=local, global_=global_, now=NOW)

    assert match is not None
    assert match.scope == "local"
    assert match.entry.reason == "local"


def test_global_entry_applies_without_local_match() -> None:
    local = [_entry("large-file", "lib/**")]
    global_ = [_entry("large-file")]

    match = resolve("large-file", "src/a.ts", local=local, global_=global_, now=NOW)

    assert match is not None
    assert match.scope == "global"


def test_more_specific_glob_wins_within_scope() -> None:
    local = [_entry("*", "src/**", reason="broad"), _entry("large-file", "src/auth/**", reason="narrow")]

    match = resolve("large-file", "src/auth/session.ts", local=local, global_=[], now=NOW)

    assert match is not None
    assert match.entry.reason == "narrow"


def test_ties_go_to_the_earliest_entry() -> None:
    local = [_entry("large-file", "src/*.ts", reason="first"), _entry("large-*", "src/*.ts", reason="second")]

    match = resolve("large-file", "src/a.ts", local=local, global_=[], now=NOW)

    assert match is not None
    assert match.entry.reason == "first"
    assert match.order == 0


def test_expired_entries_never_match() -> None:
    local = [_entry("large-file", expires_at=NOW)]

    assert resolve("large-file", "src/a.ts", local=local, global_=[], now=NOW) is None
    assert resolve("large-file", "src/a.ts", local=local, global_=[], now=NOW - timedelta(seconds=1)) is not None


def test_glob_must_match_path() -> None:
    local = [_entry("large-file", "lib/**")]

    assert resolve("large-file", "src/a.ts", local=local, global_=[], now=NOW) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("12h", timedelta(hours=12)),
        ("7d", timedelta(days=7)),
        ("2w", timedelta(days=14)),
        ("3m", timedelta(days=90)),
        (" 1D ", timedelta(days=1)),
    ],
)
def test_parse_duration(value: str, expected: timedelta) -> None:
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["0d", "5y", "d", "-1d", "1.5d"])
def test_parse_duration_rejects_invalid(value: str) -> None:
    with pytest.raises(SuppressionError):
        parse_duration(value)


@pytest.mark.parametrize(
    ("signal_id", "expected"),
    [
        ("sec-eval", True),
        ("auth-bypass", True),
        ("hardcoded-token", True),
        ("sql-injection-risk", True),
        ("large-file", False),
        ("react-effect-no-deps", False),
    ],
)
def test_is_security_signal(signal_id: str, expected: bool) -> None:
    assert is_security_signal(signal_id) is expected
