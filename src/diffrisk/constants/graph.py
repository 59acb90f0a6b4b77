"""Constants for import extraction and blast radius resolution."""

from __future__ import annotations

import re

ES_IMPORT_PATTERN: re.Pattern[str] = re.compile(
    r"""(?:import|export)\s+(?:[\w*{}\s,$]+\s+from\s+)?['"]([^'"]+)['"]""",
)
REQUIRE_PATTERN: re.Pattern[str] = re.compile(r"""require\(\s*['"]([^'"]+)['"]\s*\)""")
DYNAMIC_IMPORT_PATTERN: re.Pattern[str] = re.compile(r"""import\(\s*['"]([^'"]+)['"]\s*\)""")

IMPORT_PATTERNS: tuple[re.Pattern[str], ...] = (
    ES_IMPORT_PATTERN,
    REQUIRE_PATTERN,
    DYNAMIC_IMPORT_PATTERN,
)

RESOLVE_SUFFIXES: tuple[str, ...] = (
    "",
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    "/index.ts",
    "/index.tsx",
    "/index.js",
)

FALLBACK_STRIP_EXTENSIONS: tuple[str, ...] = (".tsx", ".ts", ".jsx", ".js", ".mjs", ".cjs")

GRAPH_CONFIDENCE: str = "medium"
GRAPH_CONFIDENCE_REASON: str = "Regex-based import resolution (may miss path aliases and barrel exports)"
FALLBACK_CONFIDENCE: str = "low"
FALLBACK_CONFIDENCE_REASON: str = "Simplified import matching (no transitive analysis)"
DISABLED_CONFIDENCE_REASON: str = "Blast radius analysis disabled"

VALID_BLAST_RADIUS_MODES: frozenset[str] = frozenset({"graph", "fallback", "off"})
DEFAULT_BLAST_RADIUS_MODE: str = "graph"
