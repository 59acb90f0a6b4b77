"""Filesystem helpers."""

from __future__ import annotations

from .json_io import canonical_json, load_json_file, write_json_atomic

__all__ = ["canonical_json", "load_json_file", "write_json_atomic"]
