"""Branding constants for terminal output."""

from __future__ import annotations

BRAND_NAME: str = "DIFFRISK"
ASCII_LOGO_LINES: tuple[str, ...] = (
    ">_ DIFFRISK",
    "     // change risk triage for pull requests",
)
EVALUATION_SUMMARY_TITLE: str = "Risk summary"
CLI_DESCRIPTION: str = "\n".join((*ASCII_LOGO_LINES, "", f"{BRAND_NAME} change risk evaluator"))
