"""Source file discovery for import graph construction."""

from __future__ import annotations

import logging
from pathlib import Path

from diffrisk.constants.discovery import EXCLUDED_DIRS, SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)


def discover_source_files(root: Path) -> list[Path]:
    """Source files under ``root`` outside vendored and build directories, sorted."""
    resolved_root = root.resolve()
    discovered: list[Path] = []
    for path in resolved_root.rglob("*"):
        if path.suffix not in SOURCE_EXTENSIONS or not path.is_file():
            continue
        relative_parts = path.relative_to(resolved_root).parts
        if any(part in EXCLUDED_DIRS for part in relative_parts[:-1]):
            continue
        discovered.append(path)
    return sorted(discovered, key=lambda path: path.relative_to(resolved_root).as_posix())


def read_sources(root: Path, warnings: list[str]) -> dict[str, str]:
    """Map relative POSIX paths to file text; unreadable files are skipped with a warning."""
    resolved_root = root.resolve()
    sources: dict[str, str] = {}
    for path in discover_source_files(resolved_root):
        relative = path.relative_to(resolved_root).as_posix()
        try:
            sources[relative] = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            warning = f"Failed to read source file: {relative} ({exc})"
            warnings.append(warning)
            logger.warning(warning)
    return sources
