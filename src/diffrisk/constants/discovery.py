"""Constants for source file discovery."""

from __future__ import annotations

SOURCE_EXTENSIONS: frozenset[str] = frozenset({".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs"})

EXCLUDED_DIRS: frozenset[str] = frozenset({"node_modules", "dist", "build", ".git", "coverage"})
