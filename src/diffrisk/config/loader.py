"""Config loading and normalization from ``.diffrisk.yml``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from diffrisk.config.model import DiffRiskConfig
from diffrisk.constants.cache import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_MAX_AGE_HOURS,
    DEFAULT_CACHE_MAX_ENTRIES,
)
from diffrisk.constants.config import CONFIG_FILENAMES, CONFIG_VERSION, THRESHOLD_MAX, THRESHOLD_MIN_EXCLUSIVE
from diffrisk.constants.graph import DEFAULT_BLAST_RADIUS_MODE, VALID_BLAST_RADIUS_MODES
from diffrisk.constants.policy import DEFAULT_PROFILE, VALID_PROFILES
from diffrisk.constants.topn import DEFAULT_TOP_N
from diffrisk.exceptions import ConfigError
from diffrisk.policy.loader import parse_action_mappings, parse_exceptions, parse_rules
from diffrisk.scanner.cache import CacheSettings
from diffrisk.scanner.ignore import IgnoreSettings
from diffrisk.utils.globs import glob_error


def find_config_path(root: Path, config_path: Path | None = None) -> Path | None:
    """Explicit path if given, else the first default config file that exists."""
    if config_path is not None:
        return config_path.resolve()
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate.resolve()
    return None


def read_config_text(root: Path, config_path: Path | None = None) -> str:
    """Raw config text, or an empty string when no config file exists."""
    path = find_config_path(root, config_path)
    if path is None or not path.is_file():
        return ""
    return path.read_text(encoding="utf-8")


def load_config(root: Path, config_path: Path | None = None) -> DiffRiskConfig:
    """Load and validate config; a missing default file yields defaults."""
    root = root.resolve()
    path = find_config_path(root, config_path)
    if path is None:
        return DiffRiskConfig()
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML config file at {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file at {path} must be a YAML mapping")
    return config_from_mapping(raw)


def _mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping")
    return value


def _threshold(value: Any, name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"thresholds.{name} must be a number")
    if not THRESHOLD_MIN_EXCLUSIVE < float(value) <= THRESHOLD_MAX:
        raise ConfigError(f"thresholds.{name} must be greater than 0 and at most 10, got {value}")
    return float(value)


def _positive_int(value: Any, name: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer")
    return value


def _ignore_settings(raw: dict[str, Any]) -> IgnoreSettings:
    ignore = _mapping(raw, "ignore")
    patterns = ignore.get("patterns") or []
    if not isinstance(patterns, list) or not all(isinstance(pattern, str) for pattern in patterns):
        raise ConfigError("ignore.patterns must be a list of strings")
    for index, pattern in enumerate(patterns):
        problem = glob_error(pattern)
        if problem is not None:
            raise ConfigError(f"Invalid ignore.patterns.{index}: {problem}")
    flags: dict[str, bool] = {}
    for name in ("include_tests", "include_config", "override_defaults"):
        value = ignore.get(name, False)
        if not isinstance(value, bool):
            raise ConfigError(f"ignore.{name} must be a boolean")
        flags[name] = value
    return IgnoreSettings(patterns=tuple(patterns), **flags)


def config_from_mapping(raw: dict[str, Any]) -> DiffRiskConfig:
    """Build a config from an already-parsed mapping."""
    version = raw.get("version", CONFIG_VERSION)
    if version != CONFIG_VERSION:
        raise ConfigError(f"Unsupported config version {version!r}; expected {CONFIG_VERSION}")

    profile = raw.get("profile") or DEFAULT_PROFILE
    if not isinstance(profile, str) or profile not in VALID_PROFILES:
        raise ConfigError(f"profile must be one of: {', '.join(sorted(VALID_PROFILES))}")

    thresholds = _mapping(raw, "thresholds")
    fail_threshold = _threshold(thresholds.get("fail"), "fail")
    warn_threshold = _threshold(thresholds.get("warn"), "warn")
    if fail_threshold is not None and warn_threshold is not None and warn_threshold > fail_threshold:
        raise ConfigError("thresholds.warn must not exceed thresholds.fail")

    blast = _mapping(raw, "blast_radius")
    mode = blast.get("mode") or DEFAULT_BLAST_RADIUS_MODE
    if not isinstance(mode, str) or mode not in VALID_BLAST_RADIUS_MODES:
        raise ConfigError(f"blast_radius.mode must be one of: {', '.join(sorted(VALID_BLAST_RADIUS_MODES))}")

    cache_raw = _mapping(raw, "cache")
    enabled = cache_raw.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ConfigError("cache.enabled must be a boolean")
    cache_dir = cache_raw.get("dir", DEFAULT_CACHE_DIR)
    if not isinstance(cache_dir, str) or not cache_dir.strip():
        raise ConfigError("cache.dir must be a non-empty string")
    max_age = cache_raw.get("max_age_hours", DEFAULT_CACHE_MAX_AGE_HOURS)
    if isinstance(max_age, bool) or not isinstance(max_age, (int, float)) or max_age <= 0:
        raise ConfigError("cache.max_age_hours must be a positive number")

    suppressions = _mapping(raw, "suppressions")
    local_path = suppressions.get("local_path")
    if local_path is not None and not isinstance(local_path, str):
        raise ConfigError("suppressions.local_path must be a string")

    actions = _mapping(raw, "actions")

    return DiffRiskConfig(
        version=version,
        profile=profile,
        fail_threshold=fail_threshold,
        warn_threshold=warn_threshold,
        top_n=_positive_int(raw.get("top_n"), "top_n", DEFAULT_TOP_N),
        rules=parse_rules(raw.get("rules")),
        exceptions=parse_exceptions(raw.get("exceptions")),
        action_mappings=parse_action_mappings(actions.get("mapping")),
        blast_radius_mode=mode,
        cache=CacheSettings(
            enabled=enabled,
            dir=cache_dir,
            max_age_hours=float(max_age),
            max_entries=_positive_int(cache_raw.get("max_entries"), "cache.max_entries", DEFAULT_CACHE_MAX_ENTRIES),
        ),
        local_suppressions_path=local_path,
        ignore=_ignore_settings(raw),
    )
