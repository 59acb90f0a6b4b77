"""Preflight validation shared by ``validate-config`` and ``evaluate``."""

from __future__ import annotations

from pathlib import Path

from diffrisk.config import validate_config_file
from diffrisk.constants.validation import CFG010
from diffrisk.exceptions.validation import ValidationError, sort_errors


def preflight_validate(root: Path, config_path: Path | None = None) -> list[ValidationError]:
    """Run all preflight checks; an empty list means the run may proceed."""
    errors: list[ValidationError] = []
    resolved_root = root.resolve()
    if not resolved_root.is_dir():
        errors.append(
            ValidationError(
                code=CFG010,
                path=str(resolved_root),
                field="",
                message=f"root directory does not exist: {resolved_root}",
            )
        )
        return sort_errors(errors)

    errors.extend(validate_config_file(root, config_path, config_explicit=config_path is not None))
    return sort_errors(errors)
