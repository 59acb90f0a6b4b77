"""Structured validation errors collected by ``validate-config``."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationError:
    """One config problem with a stable code and a dotted field location."""

    code: str
    path: str
    field: str
    message: str
    hint: str = ""

    def format(self) -> str:
        """Render as ``[CODE] path field: message (hint)``."""
        location = f"{self.path} {self.field}:" if self.field else f"{self.path}:"
        text = f"[{self.code}] {location} {self.message}"
        if self.hint:
            text = f"{text} ({self.hint})"
        return text

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code,
            "path": self.path,
            "field": self.field,
            "message": self.message,
            "hint": self.hint,
        }


def sort_errors(errors: list[ValidationError]) -> list[ValidationError]:
    """Order errors by code, then field, then message."""
    return sorted(errors, key=lambda error: (error.code, error.path, error.field, error.message))


def format_errors(errors: list[ValidationError]) -> str:
    """Join sorted errors, one per line."""
    return "\n".join(error.format() for error in sort_errors(errors))
