"""Constants for report layout and stdout formatting."""

from __future__ import annotations

REPORT_SCHEMA_VERSION: str = "1.0.0"
REPORT_TEMP_PREFIX: str = ".tmp-"
REPORT_TEMP_SUFFIX: str = ".json"

ANSI_RED: str = "\033[31m"
ANSI_YELLOW: str = "\033[33m"
ANSI_GREEN: str = "\033[32m"
ANSI_CYAN: str = "\033[36m"
ANSI_DIM: str = "\033[2m"
ANSI_BOLD: str = "\033[1m"
ANSI_RESET: str = "\033[0m"

RULE_SEVERITY_COLORS: dict[str, str] = {
    "blocker": ANSI_RED,
    "warning": ANSI_YELLOW,
    "info": ANSI_CYAN,
}
