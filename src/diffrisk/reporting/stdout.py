"""Human-readable stdout summary for evaluation reports."""

from __future__ import annotations

from typing import Any

from diffrisk.constants.branding import ASCII_LOGO_LINES, EVALUATION_SUMMARY_TITLE
from diffrisk.constants.reporting import (
    ANSI_DIM,
    ANSI_GREEN,
    ANSI_RED,
    ANSI_RESET,
    ANSI_YELLOW,
    RULE_SEVERITY_COLORS,
)
from diffrisk.constants.scoring import RISK_BAND_HIGH_MIN, RISK_BAND_MEDIUM_MIN


def _colorize(text: str, color: str) -> str:
    return f"{color}{text}{ANSI_RESET}"


def _color_score(score: float) -> str:
    text = f"{score:.1f}"
    if score >= RISK_BAND_HIGH_MIN:
        return _colorize(text, ANSI_RED)
    if score >= RISK_BAND_MEDIUM_MIN:
        return _colorize(text, ANSI_YELLOW)
    return _colorize(text, ANSI_GREEN)


class StdoutReporter:
    """Formats a report dict for the terminal.

    Works on the serialized report so cached and fresh runs render the same.
    """

    def __init__(self, report: dict[str, Any], *, color: bool = True, verbose: bool = False) -> None:
        self._report = report
        self._color = color
        self._verbose = verbose

    def render(self) -> str:
        sections = [self._render_header(), self._render_top_n(), self._render_footer()]
        return "\n".join(section for section in sections if section)

    def _severity(self, severity: str) -> str:
        color = RULE_SEVERITY_COLORS.get(severity, "")
        return _colorize(severity, color) if self._color and color else severity

    def _score(self, score: float) -> str:
        return _color_score(score) if self._color else f"{score:.1f}"

    def _render_header(self) -> str:
        r = self._report
        summary = r["summary"]
        sep = "  " + "─" * 38
        verdict = "FAIL" if r["exit_code"] else "PASS"
        if self._color:
            verdict = _colorize(verdict, ANSI_RED if r["exit_code"] else ANSI_GREEN)

        lines = [
            "",
            f"  {ASCII_LOGO_LINES[0]}",
            f"  {ASCII_LOGO_LINES[1]}",
            f"  {EVALUATION_SUMMARY_TITLE}",
            sep,
            "",
            f"  Files       {summary['files']} evaluated / {summary['suppressed']} signal(s) suppressed",
            (
                f"  Results     {summary['blockers']} blocker / "
                f"{summary['warnings']} warning / {summary['infos']} info"
            ),
            f"  Profile     {r['profile']} (blocker threshold {r['blocker_threshold']:.1f})",
        ]
        if summary["ignored"]:
            lines.append(f"  Ignored     {summary['ignored']} file(s)")
            if self._verbose:
                for item in r["ignored"]:
                    lines.append(f"              {item['path']} [{item['source']}: {item['pattern']}]")
        if summary["excepted"]:
            lines.append(f"  Excepted    {', '.join(summary['excepted'])}")
        lines.append(f"  Verdict     {verdict}")
        if self._verbose:
            lines.append(f"  Duration    {r['duration_ms']}ms")
            lines.append(f"  Input hash  {r['determinism']['input_hash']}")
        lines.append("")
        return "\n".join(lines)

    def _render_top_n(self) -> str:
        top_n = self._report["top_n"]
        lines = [f"  {top_n['summary']}"]
        if not top_n["items"]:
            return "\n".join(lines)

        files = {file["path"]: file for file in self._report["files"]}
        for item in top_n["items"]:
            selection = item["selection"]
            lines.append(
                f"  {selection['rank']}. [{self._severity(item['severity'])}] {item['path']}"
                f"  risk {self._score(item['risk_score'])}"
                f"  blast {item['blast_radius']}  ({item['rule_id']})"
            )
            file = files.get(item["path"])
            if file is not None:
                gate = file["gate"]
                shown = gate["detailed"] if self._verbose else gate["display"]
                lines.append(f"       Signals: {gate['summary']}: {', '.join(shown)}")
                for reason in file["breakdown"]["reason_chain"]:
                    lines.append(f"       {reason}")
            for action in item["actions"]:
                detail = f" `{action['command']}`" if action.get("command") else ""
                lines.append(f"       -> {action['type']}: {action['text']}{detail}")
        lines.append("")
        if top_n["rationale"]:
            rationale = f"  Why these: {top_n['rationale']}"
            lines.append(_colorize(rationale, ANSI_DIM) if self._color else rationale)
        return "\n".join(lines)

    def _render_footer(self) -> str:
        lines: list[str] = []
        hidden = self._report["top_n"].get("hidden_message")
        if hidden:
            lines.append(f"  {hidden}")
        for warning in self._report["warnings"]:
            text = f"  warning: {warning}"
            lines.append(_colorize(text, ANSI_YELLOW) if self._color else text)
        return "\n".join(lines)
