"""Configuration loading for diffrisk."""

from __future__ import annotations

from .fingerprint import config_fingerprint
from .loader import config_from_mapping, find_config_path, load_config, read_config_text
from .model import DiffRiskConfig
from .validator import validate_config_file

__all__ = [
    "DiffRiskConfig",
    "config_fingerprint",
    "config_from_mapping",
    "find_config_path",
    "load_config",
    "read_config_text",
    "validate_config_file",
]
