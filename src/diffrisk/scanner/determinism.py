"""Determinism hashing over normalized inputs and outputs.

Two runs on identical diff, config, profile and options must produce the
same input hash and the same output hash, even though wall-clock fields
(timestamps, durations) differ between them.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from diffrisk.constants.determinism import SHORT_HASH_LENGTH, VOLATILE_FIELDS
from diffrisk.io import canonical_json


def short_hash(text: str) -> str:
    """First hex characters of the SHA-256 of ``text``."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:SHORT_HASH_LENGTH]


def normalize_for_hash(text: str) -> str:
    """Unify line endings and drop trailing spaces and tabs per line."""
    unified = text.replace("\r\n", "\n").replace("\r", "\n")
    return "\n".join(line.rstrip(" \t") for line in unified.split("\n"))


@dataclass(frozen=True)
class DeterminismInput:
    diff_content: str
    config_text: str = ""
    profile: str = ""
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeterminismResult:
    input_hash: str
    output_hash: str
    blocker_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    exit_code: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_hash": self.input_hash,
            "output_hash": self.output_hash,
            "blocker_count": self.blocker_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "exit_code": self.exit_code,
        }


def compute_input_hash(data: DeterminismInput) -> str:
    payload = {
        "diff": normalize_for_hash(data.diff_content),
        "config": normalize_for_hash(data.config_text),
        "profile": data.profile,
        "options": data.options,
    }
    return short_hash(canonical_json(payload))


def strip_volatile_fields(value: Any) -> Any:
    """Recursively drop volatile keys from dicts, descending into lists."""
    if isinstance(value, dict):
        return {key: strip_volatile_fields(item) for key, item in value.items() if key not in VOLATILE_FIELDS}
    if isinstance(value, list):
        return [strip_volatile_fields(item) for item in value]
    return value


def compute_output_hash(output: str) -> str:
    """Hash a JSON report with volatile fields removed and keys sorted.

    Output that is not JSON is hashed as normalized text.
    """
    try:
        parsed = json.loads(output)
    except ValueError:
        return short_hash(normalize_for_hash(output))
    return short_hash(canonical_json(strip_volatile_fields(parsed)))


def check_determinism(
    data: DeterminismInput,
    run: Callable[[DeterminismInput], tuple[str, dict[str, int]]],
) -> DeterminismResult:
    """Run ``run`` once and hash its input and output.

    ``run`` returns the rendered JSON output plus counters with keys
    ``blockers``, ``warnings``, ``infos`` and ``exit_code``.
    """
    output, counts = run(data)
    return DeterminismResult(
        input_hash=compute_input_hash(data),
        output_hash=compute_output_hash(output),
        blocker_count=counts.get("blockers", 0),
        warning_count=counts.get("warnings", 0),
        info_count=counts.get("infos", 0),
        exit_code=counts.get("exit_code", 0),
    )


def compare_determinism_results(first: DeterminismResult, second: DeterminismResult) -> list[str]:
    """Names of fields that differ between two runs; empty means deterministic."""
    return [name for name, value in first.to_dict().items() if second.to_dict()[name] != value]


def format_determinism_result(result: DeterminismResult) -> str:
    return (
        f"input={result.input_hash} output={result.output_hash} "
        f"blockers={result.blocker_count} warnings={result.warning_count} "
        f"infos={result.info_count} exit={result.exit_code}"
    )
