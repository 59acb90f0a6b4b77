"""Decode rules, exceptions and action mappings from config data.

Raw sections are checked against JSON schemas first, so a malformed rule
is reported as a ``ConfigError`` before any file is evaluated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime
from typing import Any

from jsonschema import Draft202012Validator

from diffrisk.constants.policy import ACTION_MAPPINGS_SCHEMA, EXCEPTIONS_SCHEMA, RULES_SCHEMA
from diffrisk.exceptions import ConfigError
from diffrisk.model import ActionMapping, PolicyException, Rule, RuleAction, RuleCondition
from diffrisk.utils.globs import glob_error

_RULES_VALIDATOR = Draft202012Validator(RULES_SCHEMA)
_EXCEPTIONS_VALIDATOR = Draft202012Validator(EXCEPTIONS_SCHEMA)
_ACTION_MAPPINGS_VALIDATOR = Draft202012Validator(ACTION_MAPPINGS_SCHEMA)

_TUPLE_CONDITION_KEYS: tuple[str, ...] = (
    "evidence_contains",
    "evidence_tags",
    "path_matches",
    "path_excludes",
    "signal_types",
    "signal_classes",
)


def schema_messages(validator: Draft202012Validator, data: Any, section: str) -> list[tuple[str, str]]:
    """Return ``(field, message)`` pairs for every schema violation, sorted."""
    messages: list[tuple[str, str]] = []
    for error in validator.iter_errors(data):
        location = ".".join(str(part) for part in error.absolute_path)
        field = f"{section}.{location}" if location else section
        messages.append((field, error.message))
    return sorted(messages)


def _raise_first(validator: Draft202012Validator, data: Any, section: str) -> None:
    messages = schema_messages(validator, data, section)
    if messages:
        field, message = messages[0]
        raise ConfigError(f"Invalid {field}: {message}")


def _rule_globs(raw: list[dict[str, Any]], section: str) -> Iterator[tuple[str, str]]:
    for index, item in enumerate(raw):
        for key in ("path_matches", "path_excludes"):
            for position, pattern in enumerate(item["when"].get(key, ())):
                yield f"{section}.{index}.when.{key}.{position}", pattern


def _exception_globs(raw: list[dict[str, Any]], section: str) -> Iterator[tuple[str, str]]:
    for index, item in enumerate(raw):
        for position, pattern in enumerate(item["paths"]):
            yield f"{section}.{index}.paths.{position}", pattern


def _action_mapping_globs(raw: list[dict[str, Any]], section: str) -> Iterator[tuple[str, str]]:
    for index, item in enumerate(raw):
        yield f"{section}.{index}.pattern", item["pattern"]


_GLOB_FIELDS: dict[str, Callable[[list[dict[str, Any]], str], Iterator[tuple[str, str]]]] = {
    "rules": _rule_globs,
    "exceptions": _exception_globs,
    "actions.mapping": _action_mapping_globs,
}


def glob_messages(data: list[dict[str, Any]], kind: str, section: str) -> list[tuple[str, str]]:
    """``(field, message)`` pairs for glob patterns that do not compile.

    ``kind`` picks where patterns live (``rules``, ``exceptions`` or
    ``actions.mapping``); ``data`` must already satisfy that schema.
    """
    messages: list[tuple[str, str]] = []
    for field, pattern in _GLOB_FIELDS[kind](data, section):
        error = glob_error(pattern)
        if error is not None:
            messages.append((field, error))
    return messages


def _raise_bad_glob(data: list[dict[str, Any]], kind: str, section: str) -> None:
    messages = glob_messages(data, kind, section)
    if messages:
        field, message = messages[0]
        raise ConfigError(f"Invalid {field}: {message}")


def _reject_duplicate_ids(items: list[dict[str, Any]], section: str) -> None:
    seen: set[str] = set()
    for item in items:
        if item["id"] in seen:
            raise ConfigError(f"Duplicate id {item['id']!r} in {section}")
        seen.add(item["id"])


def parse_condition(raw: dict[str, Any]) -> RuleCondition:
    values: dict[str, Any] = {}
    for key, value in raw.items():
        values[key] = tuple(value) if key in _TUPLE_CONDITION_KEYS else value
    return RuleCondition(**values)


def parse_action(raw: dict[str, Any]) -> RuleAction:
    return RuleAction(
        type=raw["type"],
        text=raw["text"],
        command=raw.get("command"),
        reviewers=tuple(raw.get("reviewers", ())),
        priority=int(raw.get("priority", 50)),
    )


def parse_rules(raw: Any, *, section: str = "rules") -> tuple[Rule, ...]:
    """Validate and decode a list of rule mappings."""
    if raw is None:
        return ()
    _raise_first(_RULES_VALIDATOR, raw, section)
    _reject_duplicate_ids(raw, section)
    _raise_bad_glob(raw, "rules", section)

    rules: list[Rule] = []
    for item in raw:
        then = item["then"]
        raw_actions = then.get("actions")
        rules.append(
            Rule(
                id=item["id"],
                when=parse_condition(item["when"]),
                severity=then["severity"],
                actions=None if raw_actions is None else tuple(parse_action(action) for action in raw_actions),
                description=item.get("description", ""),
            )
        )
    return tuple(rules)


def parse_until(value: Any, exception_id: str) -> datetime:
    """Parse an ISO date or datetime; naive values are UTC, dates mean midnight UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ConfigError(f"Exception {exception_id!r} has an unparseable `until`: {value!r}") from exc
    else:
        raise ConfigError(f"Exception {exception_id!r} has an unparseable `until`: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def stringify_dates(raw: Any) -> Any:
    # YAML turns bare dates into ``date`` objects; schema checks expect strings.
    if not isinstance(raw, list):
        return raw
    normalized: list[Any] = []
    for item in raw:
        if isinstance(item, dict) and isinstance(item.get("until"), date):
            item = {**item, "until": item["until"].isoformat()}
        normalized.append(item)
    return normalized


def parse_exceptions(raw: Any) -> tuple[PolicyException, ...]:
    """Validate and decode policy exceptions."""
    if raw is None:
        return ()
    normalized = stringify_dates(raw)
    _raise_first(_EXCEPTIONS_VALIDATOR, normalized, "exceptions")
    _reject_duplicate_ids(normalized, "exceptions")
    _raise_bad_glob(normalized, "exceptions", "exceptions")
    return tuple(
        PolicyException(
            id=item["id"],
            paths=tuple(item["paths"]),
            until=parse_until(item["until"], item["id"]) if item.get("until") else None,
            reason=item.get("reason"),
        )
        for item in normalized
    )


def parse_action_mappings(raw: Any) -> tuple[ActionMapping, ...]:
    if raw is None:
        return ()
    _raise_first(_ACTION_MAPPINGS_VALIDATOR, raw, "actions.mapping")
    _raise_bad_glob(raw, "actions.mapping", "actions.mapping")
    return tuple(
        ActionMapping(
            pattern=item["pattern"],
            commands=tuple(item.get("commands", ())),
            reviewers=tuple(item.get("reviewers", ())),
            notes=item.get("notes"),
        )
        for item in raw
    )
