"""Collect-all validation for ``.diffrisk.yml``."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from diffrisk.config.loader import find_config_path
from diffrisk.constants.config import CONFIG_VERSION, THRESHOLD_MAX, THRESHOLD_MIN_EXCLUSIVE
from diffrisk.constants.graph import VALID_BLAST_RADIUS_MODES
from diffrisk.constants.policy import (
    ACTION_MAPPINGS_SCHEMA,
    EXCEPTIONS_SCHEMA,
    RULES_SCHEMA,
    VALID_PROFILES,
)
from diffrisk.constants.validation import (
    ALLOWED_ACTIONS_KEYS,
    ALLOWED_BLAST_RADIUS_KEYS,
    ALLOWED_CACHE_KEYS,
    ALLOWED_CONFIG_KEYS,
    ALLOWED_IGNORE_KEYS,
    ALLOWED_SUPPRESSIONS_KEYS,
    ALLOWED_THRESHOLD_KEYS,
    CFG001,
    CFG002,
    CFG003,
    CFG004,
    CFG005,
    CFG006,
    CFG007,
    CFG008,
    CFG009,
    CFG011,
    CFG012,
    CFG013,
    CFG014,
    CFG015,
    CFG016,
)
from diffrisk.exceptions import ConfigError
from diffrisk.exceptions.validation import ValidationError
from diffrisk.policy.loader import glob_messages, parse_until, schema_messages, stringify_dates
from diffrisk.utils.globs import glob_error


def validate_config_file(
    root: Path,
    config_path: Path | None = None,
    *,
    config_explicit: bool = False,
) -> list[ValidationError]:
    """Validate a config file and return every problem found.

    Shared by ``diffrisk validate-config`` and the ``evaluate`` preflight.
    Never raises.
    """
    errors: list[ValidationError] = []
    path = find_config_path(root.resolve(), config_path)
    if path is None:
        return errors
    path_str = str(path)

    if not path.exists():
        if config_explicit:
            errors.append(ValidationError(code=CFG001, path=path_str, field="", message=f"config file not found: {path}"))
        return errors

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        errors.append(ValidationError(code=CFG002, path=path_str, field="", message=f"invalid YAML: {exc}"))
        return errors

    if raw is None:
        return errors
    if not isinstance(raw, dict):
        errors.append(
            ValidationError(
                code=CFG003,
                path=path_str,
                field="",
                message=f"config must be a YAML mapping, got {type(raw).__name__}",
            )
        )
        return errors

    _check_unknown_keys(raw, ALLOWED_CONFIG_KEYS, "", path_str, errors)

    if "version" in raw and raw["version"] != CONFIG_VERSION:
        errors.append(
            ValidationError(
                code=CFG006,
                path=path_str,
                field="version",
                message="unsupported config version",
                hint=f"expected {CONFIG_VERSION}; got: {raw['version']!r}",
            )
        )

    if "profile" in raw:
        value = raw["profile"]
        if not isinstance(value, str) or value not in VALID_PROFILES:
            errors.append(
                ValidationError(
                    code=CFG006,
                    path=path_str,
                    field="profile",
                    message="invalid value for `profile`",
                    hint=f"expected one of: {', '.join(sorted(VALID_PROFILES))}; got: {value!r}",
                )
            )

    if "top_n" in raw:
        value = raw["top_n"]
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(
                ValidationError(
                    code=CFG005,
                    path=path_str,
                    field="top_n",
                    message="invalid type for `top_n`",
                    hint="expected a positive integer",
                )
            )
        elif value <= 0:
            errors.append(
                ValidationError(code=CFG007, path=path_str, field="top_n", message=f"`top_n` must be positive, got {value}")
            )

    _validate_thresholds(raw, path_str, errors)
    _validate_blast_radius(raw, path_str, errors)
    _validate_cache(raw, path_str, errors)
    _validate_suppressions(raw, path_str, errors)
    _validate_ignore(raw, path_str, errors)
    _validate_rules(raw, path_str, errors)
    _validate_exceptions(raw, path_str, errors)
    _validate_actions(raw, path_str, errors)
    return errors


def _suggest_key(unknown: str, allowed: frozenset[str]) -> str:
    """Return a 'did you mean ...' hint for a close key match, or empty string."""
    matches = difflib.get_close_matches(unknown, sorted(allowed), n=1, cutoff=0.6)
    if matches:
        return f"did you mean `{matches[0]}`?"
    return ""


def _check_unknown_keys(
    mapping: dict[str, Any],
    allowed: frozenset[str],
    prefix: str,
    path_str: str,
    errors: list[ValidationError],
) -> None:
    for key in sorted(str(key) for key in mapping):
        if key in allowed:
            continue
        field = f"{prefix}.{key}" if prefix else key
        where = f" in `{prefix}`" if prefix else ""
        errors.append(
            ValidationError(
                code=CFG004,
                path=path_str,
                field=field,
                message=f"unknown key `{key}`{where}",
                hint=_suggest_key(key, allowed),
            )
        )


def _nested_mapping(
    raw: dict[str, Any],
    key: str,
    allowed: frozenset[str],
    path_str: str,
    errors: list[ValidationError],
) -> dict[str, Any] | None:
    if key not in raw or raw[key] is None:
        return None
    value = raw[key]
    if not isinstance(value, dict):
        errors.append(ValidationError(code=CFG009, path=path_str, field=key, message=f"`{key}` must be a mapping"))
        return None
    _check_unknown_keys(value, allowed, key, path_str, errors)
    return value


def _validate_thresholds(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    thresholds = _nested_mapping(raw, "thresholds", ALLOWED_THRESHOLD_KEYS, path_str, errors)
    if thresholds is None:
        return
    valid: dict[str, float] = {}
    for name in ("fail", "warn"):
        if name not in thresholds or thresholds[name] is None:
            continue
        value = thresholds[name]
        field = f"thresholds.{name}"
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append(
                ValidationError(
                    code=CFG005,
                    path=path_str,
                    field=field,
                    message=f"invalid type for `{field}`",
                    hint="expected a number",
                )
            )
        elif not THRESHOLD_MIN_EXCLUSIVE < value <= THRESHOLD_MAX:
            errors.append(
                ValidationError(
                    code=CFG007,
                    path=path_str,
                    field=field,
                    message=f"`{field}` must be greater than 0 and at most 10, got {value}",
                )
            )
        else:
            valid[name] = float(value)
    if "fail" in valid and "warn" in valid and valid["warn"] > valid["fail"]:
        errors.append(
            ValidationError(
                code=CFG008,
                path=path_str,
                field="thresholds",
                message="`thresholds.warn` exceeds `thresholds.fail`",
                hint="lower warn or raise fail",
            )
        )


def _validate_blast_radius(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    blast = _nested_mapping(raw, "blast_radius", ALLOWED_BLAST_RADIUS_KEYS, path_str, errors)
    if blast is None or "mode" not in blast:
        return
    if not isinstance(blast["mode"], str) or blast["mode"] not in VALID_BLAST_RADIUS_MODES:
        errors.append(
            ValidationError(
                code=CFG006,
                path=path_str,
                field="blast_radius.mode",
                message="invalid value for `blast_radius.mode`",
                hint=f"expected one of: {', '.join(sorted(VALID_BLAST_RADIUS_MODES))}; got: {blast['mode']!r}",
            )
        )


def _validate_cache(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    cache = _nested_mapping(raw, "cache", ALLOWED_CACHE_KEYS, path_str, errors)
    if cache is None:
        return
    if "enabled" in cache and not isinstance(cache["enabled"], bool):
        errors.append(
            ValidationError(
                code=CFG005,
                path=path_str,
                field="cache.enabled",
                message="invalid type for `cache.enabled`",
                hint="expected a boolean",
            )
        )
    if "dir" in cache and (not isinstance(cache["dir"], str) or not cache["dir"].strip()):
        errors.append(
            ValidationError(
                code=CFG005,
                path=path_str,
                field="cache.dir",
                message="invalid type for `cache.dir`",
                hint="expected a non-empty string",
            )
        )
    for name in ("max_age_hours", "max_entries"):
        if name not in cache:
            continue
        value = cache[name]
        expected_int = name == "max_entries"
        wrong_type = isinstance(value, bool) or not isinstance(value, int if expected_int else (int, float))
        if wrong_type or value <= 0:
            errors.append(
                ValidationError(
                    code=CFG005 if wrong_type else CFG007,
                    path=path_str,
                    field=f"cache.{name}",
                    message=f"`cache.{name}` must be a positive {'integer' if expected_int else 'number'}",
                )
            )


def _validate_suppressions(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    suppressions = _nested_mapping(raw, "suppressions", ALLOWED_SUPPRESSIONS_KEYS, path_str, errors)
    if suppressions is None or "local_path" not in suppressions:
        return
    if not isinstance(suppressions["local_path"], str):
        errors.append(
            ValidationError(
                code=CFG005,
                path=path_str,
                field="suppressions.local_path",
                message="invalid type for `suppressions.local_path`",
                hint="expected a string",
            )
        )


def _validate_ignore(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    ignore = _nested_mapping(raw, "ignore", ALLOWED_IGNORE_KEYS, path_str, errors)
    if ignore is None:
        return
    for name in ("include_tests", "include_config", "override_defaults"):
        if name in ignore and not isinstance(ignore[name], bool):
            errors.append(
                ValidationError(
                    code=CFG005,
                    path=path_str,
                    field=f"ignore.{name}",
                    message=f"invalid type for `ignore.{name}`",
                    hint="expected a boolean",
                )
            )
    patterns = ignore.get("patterns")
    if patterns is None:
        return
    if not isinstance(patterns, list) or not all(isinstance(pattern, str) for pattern in patterns):
        errors.append(
            ValidationError(
                code=CFG005,
                path=path_str,
                field="ignore.patterns",
                message="invalid type for `ignore.patterns`",
                hint="expected a list of glob strings",
            )
        )
        return
    for index, pattern in enumerate(patterns):
        problem = glob_error(pattern)
        if problem is not None:
            errors.append(
                ValidationError(
                    code=CFG016,
                    path=path_str,
                    field=f"ignore.patterns.{index}",
                    message=problem,
                    hint="check for empty or reversed `[...]` character classes",
                )
            )

def _duplicate_ids(items: Any, section: str, path_str: str, errors: list[ValidationError]) -> None:
    if not isinstance(items, list):
        return
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, dict) or not isinstance(item.get("id"), str):
            continue
        if item["id"] in seen:
            errors.append(
                ValidationError(
                    code=CFG013,
                    path=path_str,
                    field=section,
                    message=f"duplicate id `{item['id']}` in `{section}`",
                )
            )
        seen.add(item["id"])


def _glob_errors(
    data: list[dict[str, Any]],
    kind: str,
    path_str: str,
    errors: list[ValidationError],
) -> None:
    for field, message in glob_messages(data, kind, kind):
        errors.append(
            ValidationError(
                code=CFG016,
                path=path_str,
                field=field,
                message=message,
                hint="check for empty or reversed `[...]` character classes",
            )
        )


def _validate_rules(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    if raw.get("rules") is None:
        return
    messages = schema_messages(Draft202012Validator(RULES_SCHEMA), raw["rules"], "rules")
    for field, message in messages:
        errors.append(ValidationError(code=CFG011, path=path_str, field=field, message=message))
    _duplicate_ids(raw["rules"], "rules", path_str, errors)
    if not messages:
        _glob_errors(raw["rules"], "rules", path_str, errors)


def _validate_exceptions(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    items = raw.get("exceptions")
    if items is None:
        return
    normalized = stringify_dates(items)
    messages = schema_messages(Draft202012Validator(EXCEPTIONS_SCHEMA), normalized, "exceptions")
    for field, message in messages:
        errors.append(ValidationError(code=CFG012, path=path_str, field=field, message=message))
    _duplicate_ids(normalized, "exceptions", path_str, errors)
    if messages or not isinstance(normalized, list):
        return
    _glob_errors(normalized, "exceptions", path_str, errors)
    for index, item in enumerate(normalized):
        if not item.get("until"):
            continue
        try:
            parse_until(item["until"], item["id"])
        except ConfigError as exc:
            errors.append(
                ValidationError(
                    code=CFG014,
                    path=path_str,
                    field=f"exceptions.{index}.until",
                    message=str(exc),
                    hint="use an ISO-8601 date such as 2026-12-31",
                )
            )


def _validate_actions(raw: dict[str, Any], path_str: str, errors: list[ValidationError]) -> None:
    actions = _nested_mapping(raw, "actions", ALLOWED_ACTIONS_KEYS, path_str, errors)
    if actions is None or actions.get("mapping") is None:
        return
    validator = Draft202012Validator(ACTION_MAPPINGS_SCHEMA)
    messages = schema_messages(validator, actions["mapping"], "actions.mapping")
    for field, message in messages:
        errors.append(ValidationError(code=CFG015, path=path_str, field=field, message=message))
    if not messages:
        _glob_errors(actions["mapping"], "actions.mapping", path_str, errors)
