"""Glob matching over forward-slash paths.

Paths and patterns are normalized to ``/`` separators before matching, so
results never depend on the host operating system.  Supported syntax:

- ``**`` matches any run of characters including ``/``; ``**/`` may also
  match zero directories.
- ``*`` matches within one path segment, ``?`` matches one character.
- ``[abc]`` / ``[!abc]`` character classes and ``{a,b}`` alternation.

Dot files are matched like any other name.
"""

from __future__ import annotations

import re
from functools import lru_cache

from diffrisk.constants.suppressions import GLOB_WILDCARD_CHARS


def normalize_path(path: str) -> str:
    """Return ``path`` with forward slashes and no leading ``./``."""
    normalized = path.replace("\\", "/").strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    while "//" in normalized:
        normalized = normalized.replace("//", "/")
    return normalized


def has_wildcard(pattern: str) -> bool:
    """Whether ``pattern`` contains any glob metacharacter."""
    return any(char in GLOB_WILDCARD_CHARS for char in pattern)


def _translate(pattern: str) -> str:
    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                if pattern.startswith("**/", index):
                    parts.append("(?:.*/)?")
                    index += 3
                else:
                    parts.append(".*")
                    index += 2
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            close = pattern.find("]", index + 1)
            if close == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : close].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                index = close + 1
                continue
        elif char == "{":
            close = pattern.find("}", index + 1)
            if close == -1:
                parts.append(re.escape(char))
            else:
                options = pattern[index + 1 : close].split(",")
                parts.append("(?:" + "|".join(_translate(option) for option in options) + ")")
                index = close + 1
                continue
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a normalized glob into an anchored regex.

    Raises ``ValueError`` for patterns that do not form a valid expression,
    such as an empty character class.
    """
    try:
        return re.compile(f"^{_translate(normalize_path(pattern))}$")
    except re.error as exc:
        raise ValueError(f"invalid glob {pattern!r}: {exc}") from exc


def glob_error(pattern: str) -> str | None:
    """Why ``pattern`` cannot be used, or None when it compiles."""
    try:
        compile_glob(pattern)
    except ValueError as exc:
        return str(exc)
    return None


def glob_match(path: str, pattern: str) -> bool:
    """Whether ``path`` matches ``pattern`` after separator normalization."""
    return compile_glob(pattern).match(normalize_path(path)) is not None


def match_any(path: str, patterns: tuple[str, ...] | list[str]) -> bool:
    """Whether ``path`` matches at least one of ``patterns``."""
    return any(glob_match(path, pattern) for pattern in patterns)
