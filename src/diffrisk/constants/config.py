"""Configuration defaults and filenames."""

from __future__ import annotations

CONFIG_FILENAMES: tuple[str, ...] = (".diffrisk.yml", ".diffrisk.yaml")
CONFIG_VERSION: int = 1

THRESHOLD_MIN_EXCLUSIVE: float = 0.0
THRESHOLD_MAX: float = 10.0
