"""Cache key inputs for an evaluation run."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from diffrisk.constants.cache import EMPTY_DIFF_HASH, GIT_TIMEOUT_SECONDS, UNKNOWN_HEAD_SHA
from diffrisk.scanner.determinism import normalize_for_hash, short_hash
from diffrisk.types import CacheKeyComponents

logger = logging.getLogger(__name__)


def hash_diff(diff_content: str) -> str:
    if not diff_content.strip():
        return EMPTY_DIFF_HASH
    return short_hash(normalize_for_hash(diff_content))


def read_head_sha(root: Path, warnings: list[str] | None = None) -> str:
    """Return ``git rev-parse HEAD`` for ``root``, or ``unknown`` when git fails."""
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=root,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        message = f"Could not read git HEAD in {root}: {exc}"
        logger.warning(message)
        if warnings is not None:
            warnings.append(message)
        return UNKNOWN_HEAD_SHA
    return completed.stdout.strip() or UNKNOWN_HEAD_SHA


def build_key_components(
    *,
    root: Path,
    head_sha: str,
    base: str,
    scope: str,
    tool_version: str,
    config_hash: str,
    diff_content: str | None,
    suppressions_hash: str | None,
) -> CacheKeyComponents:
    return {
        "repo_path": str(root.resolve()),
        "head_sha": head_sha,
        "base": base,
        "scope": scope,
        "tool_version": tool_version,
        "config_hash": config_hash,
        "diff_hash": hash_diff(diff_content) if diff_content is not None else None,
        "suppressions_hash": suppressions_hash,
    }
