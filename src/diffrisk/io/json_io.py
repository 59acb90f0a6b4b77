"""JSON helpers: canonical dumps and crash-safe file replacement."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path


def load_json_file(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


def canonical_json(payload: object) -> str:
    """Serialize with sorted keys and no insignificant whitespace."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def write_json_atomic(
    *,
    path: Path,
    payload: object,
    temp_prefix: str,
    temp_suffix: str,
    sort_keys: bool = True,
) -> None:
    """Replace ``path`` with the indented JSON form of ``payload``.

    Encoding happens before the disk is touched, so an unserializable payload
    leaves no trace.  The text then goes to a flushed sibling temp file that
    is renamed over ``path``; readers see the old document or the new one.
    """
    text = json.dumps(payload, indent=2, sort_keys=sort_keys) + "\n"
    path.parent.mkdir(parents=True, exist_ok=True)

    descriptor, temp_name = tempfile.mkstemp(dir=path.parent, prefix=temp_prefix, suffix=temp_suffix)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(descriptor, "w", encoding="utf-8") as stream:
            stream.write(text)
            stream.flush()
            os.fsync(stream.fileno())
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
