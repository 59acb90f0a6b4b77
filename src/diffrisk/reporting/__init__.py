"""Report builders and renderers."""

from __future__ import annotations

from .json_report import build_report, render_report_json, write_report
from .stdout import StdoutReporter

__all__ = [
    "StdoutReporter",
    "build_report",
    "render_report_json",
    "write_report",
]
