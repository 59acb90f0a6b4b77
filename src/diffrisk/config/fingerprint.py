"""Config fingerprinting for cache keys."""

from __future__ import annotations

import hashlib
import json

from diffrisk.config.model import DiffRiskConfig
from diffrisk.model import Rule
from diffrisk.scanner.ignore import build_ignore_list


def _rule_payload(rule: Rule) -> dict[str, object]:
    return {
        "id": rule.id,
        "when": rule.when.to_dict(),
        "severity": rule.severity,
        "actions": None if rule.actions is None else [action.to_dict() for action in rule.actions],
    }


def config_fingerprint(config: DiffRiskConfig) -> str:
    """Return a stable hash of every setting that changes evaluation output."""
    payload = {
        "version": config.version,
        "profile": config.profile,
        "fail_threshold": config.fail_threshold,
        "warn_threshold": config.warn_threshold,
        "top_n": config.top_n,
        "rules": [_rule_payload(rule) for rule in config.effective_rules],
        "exceptions": [
            {
                "id": exception.id,
                "paths": list(exception.paths),
                "until": exception.until.isoformat() if exception.until else None,
            }
            for exception in config.exceptions
        ],
        "action_mappings": [
            {
                "pattern": mapping.pattern,
                "commands": list(mapping.commands),
                "reviewers": list(mapping.reviewers),
                "notes": mapping.notes,
            }
            for mapping in config.action_mappings
        ],
        "blast_radius_mode": config.blast_radius_mode,
        "ignore": list(build_ignore_list(config.ignore)),
    }
    blob = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(blob).hexdigest()
