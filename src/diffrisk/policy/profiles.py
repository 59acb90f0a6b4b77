"""Built-in rule sets: the always-on baseline plus named profiles.

Profiles are plain rule mappings in the same shape as the ``rules`` section
of ``.diffrisk.yml`` and go through the same loader.
"""

from __future__ import annotations

from typing import Any

from diffrisk.constants.policy import CONFIG_FAIL_RULE_ID, CONFIG_WARN_RULE_ID, VALID_PROFILES
from diffrisk.exceptions import ConfigError
from diffrisk.model import Rule, RuleCondition
from diffrisk.policy.loader import parse_rules

BASELINE_RULES: list[dict[str, Any]] = [
    {
        "id": "baseline-critical-risk",
        "description": "Critical risk files always block",
        "when": {"risk_gte": 8.0},
        "then": {"severity": "blocker"},
    },
    {
        "id": "baseline-high-risk-high-radius",
        "description": "High risk + high blast radius = blocker",
        "when": {"risk_gte": 7.0, "blast_radius_gte": 10},
        "then": {"severity": "blocker"},
    },
    {
        "id": "baseline-high-risk",
        "description": "High risk files need attention",
        "when": {"risk_gte": 6.0},
        "then": {"severity": "warning"},
    },
    {
        "id": "baseline-high-blast-radius",
        "description": "High blast radius files need attention",
        "when": {"blast_radius_gte": 15},
        "then": {"severity": "warning"},
    },
    {
        "id": "baseline-side-effects-core",
        "description": "Side effects in core paths need attention",
        "when": {"evidence_contains": ["side-effect"], "path_matches": ["src/core/**", "src/store/**"]},
        "then": {"severity": "warning"},
    },
    {
        "id": "baseline-large-file",
        "description": "Large files touched",
        "when": {"evidence_contains": ["large file"]},
        "then": {"severity": "info"},
    },
]

_SHARED_PROFILE_RULES: list[dict[str, Any]] = [
    {
        "id": "critical-risk-blocks",
        "description": "Critical risk files always block",
        "when": {"risk_gte": 8.0},
        "then": {
            "severity": "blocker",
            "actions": [
                {"type": "review", "text": "Critical risk level - requires immediate review"},
                {"type": "test", "text": "Add comprehensive tests before merge"},
            ],
        },
    },
    {
        "id": "high-risk-high-radius",
        "description": "High risk + high impact = blocker",
        "when": {"risk_gte": 7.0, "blast_radius_gte": 10},
        "then": {
            "severity": "blocker",
            "actions": [
                {"type": "test", "text": "Add tests for this high-impact module"},
                {"type": "review", "text": "Request review from area owner"},
            ],
        },
    },
    {
        "id": "high-risk-warning",
        "description": "High risk files need attention",
        "when": {"risk_gte": 6.0},
        "then": {
            "severity": "warning",
            "actions": [{"type": "review", "text": "Review carefully - elevated risk level"}],
        },
    },
    {
        "id": "high-blast-radius",
        "description": "High impact files need attention",
        "when": {"blast_radius_gte": 15},
        "then": {
            "severity": "warning",
            "actions": [{"type": "review", "text": "Many files depend on this - review impact"}],
        },
    },
]

PROFILE_RULES: dict[str, list[dict[str, Any]]] = {
    "minimal": [],
    "strict": [
        *_SHARED_PROFILE_RULES,
        {
            "id": "side-effects-in-core",
            "description": "Side effects in core modules need attention",
            "when": {
                "evidence_contains": ["side-effect"],
                "path_matches": ["src/core/**", "src/lib/**", "src/shared/**"],
            },
            "then": {
                "severity": "warning",
                "actions": [
                    {"type": "refactor", "text": "Isolate side-effects for testability"},
                    {"type": "test", "text": "Add integration tests"},
                ],
            },
        },
        {
            "id": "complexity-warning",
            "description": "High complexity signals",
            "when": {"evidence_contains": ["large file", "complexity"], "risk_gte": 5.0},
            "then": {
                "severity": "info",
                "actions": [{"type": "refactor", "text": "Consider splitting into smaller modules"}],
            },
        },
    ],
    "react": [
        *_SHARED_PROFILE_RULES,
        {
            "id": "react-effect-issues",
            "description": "React useEffect issues can cause bugs",
            "when": {"evidence_tags": ["react-effect"]},
            "then": {
                "severity": "blocker",
                "actions": [
                    {"type": "refactor", "text": "Add dependency array to useEffect"},
                    {"type": "test", "text": "Add tests to verify effect behavior"},
                ],
            },
        },
        {
            "id": "side-effects-in-components",
            "description": "Side effects in components should use hooks",
            "when": {
                "evidence_contains": ["side-effect"],
                "path_matches": ["src/components/**", "src/pages/**", "app/**"],
            },
            "then": {
                "severity": "warning",
                "actions": [
                    {"type": "refactor", "text": "Move side-effects to custom hooks"},
                    {"type": "review", "text": "Ensure proper cleanup in useEffect"},
                ],
            },
        },
        {
            "id": "react-performance",
            "description": "React performance patterns",
            "when": {"evidence_contains": ["inline"]},
            "then": {
                "severity": "info",
                "actions": [
                    {"type": "refactor", "text": "Memoize callbacks with useCallback"},
                    {"type": "refactor", "text": "Move style objects outside component or use useMemo"},
                ],
            },
        },
    ],
    "vue": [
        *_SHARED_PROFILE_RULES,
        {
            "id": "vue-watch-issues",
            "description": "Vue watch without cleanup",
            "when": {"evidence_tags": ["vue-watch-no-cleanup"]},
            "then": {
                "severity": "warning",
                "actions": [
                    {"type": "refactor", "text": "Add cleanup function to watch/watchEffect"},
                    {"type": "test", "text": "Test component unmount behavior"},
                ],
            },
        },
        {
            "id": "vue-computed-side-effects",
            "description": "Computed with side effects is anti-pattern",
            "when": {"evidence_tags": ["vue-computed-side-effect"]},
            "then": {
                "severity": "blocker",
                "actions": [
                    {"type": "refactor", "text": "Move side effects out of computed property"},
                    {"type": "refactor", "text": "Use watch or method instead"},
                ],
            },
        },
        {
            "id": "vue-props-mutation",
            "description": "Props mutation is forbidden",
            "when": {"evidence_tags": ["vue-props-mutation"]},
            "then": {
                "severity": "blocker",
                "actions": [
                    {"type": "refactor", "text": "Emit event instead of mutating props"},
                    {"type": "refactor", "text": "Use local data copy if mutation needed"},
                ],
            },
        },
        {
            "id": "vue-complexity",
            "description": "Vue component complexity",
            "when": {"evidence_contains": ["vue-many-refs", "vue-large-data"]},
            "then": {
                "severity": "info",
                "actions": [
                    {"type": "refactor", "text": "Extract logic into composables"},
                    {"type": "refactor", "text": "Consider splitting into smaller components"},
                ],
            },
        },
    ],
    "angular": [
        *_SHARED_PROFILE_RULES,
        {
            "id": "angular-subscription-leaks",
            "description": "Observable subscriptions must be cleaned up",
            "when": {"evidence_tags": ["angular-subscription-leak"]},
            "then": {
                "severity": "blocker",
                "actions": [
                    {"type": "refactor", "text": "Use takeUntilDestroyed or async pipe"},
                    {"type": "refactor", "text": "Unsubscribe in ngOnDestroy"},
                ],
            },
        },
        {
            "id": "angular-nested-subscribes",
            "description": "Nested subscribes are anti-pattern",
            "when": {"evidence_tags": ["angular-nested-subscribe"]},
            "then": {
                "severity": "blocker",
                "actions": [
                    {"type": "refactor", "text": "Use switchMap, mergeMap, or concatMap"},
                    {"type": "review", "text": "Review RxJS operator usage"},
                ],
            },
        },
        {
            "id": "angular-http-errors",
            "description": "HTTP calls need error handling",
            "when": {"evidence_tags": ["angular-http-no-error"]},
            "then": {
                "severity": "warning",
                "actions": [
                    {"type": "refactor", "text": "Add catchError operator to HTTP calls"},
                    {"type": "test", "text": "Test error scenarios"},
                ],
            },
        },
        {
            "id": "angular-dom-access",
            "description": "Direct DOM access is discouraged",
            "when": {"evidence_tags": ["angular-dom-access"]},
            "then": {
                "severity": "warning",
                "actions": [
                    {"type": "refactor", "text": "Use Renderer2 for DOM manipulation"},
                    {"type": "review", "text": "Ensure SSR compatibility"},
                ],
            },
        },
        {
            "id": "angular-performance",
            "description": "Angular performance patterns",
            "when": {"evidence_contains": ["angular-no-onpush", "angular-many-viewchild"]},
            "then": {
                "severity": "info",
                "actions": [
                    {"type": "refactor", "text": "Consider ChangeDetectionStrategy.OnPush"},
                    {"type": "refactor", "text": "Reduce ViewChild queries"},
                ],
            },
        },
    ],
    "backend": [
        *_SHARED_PROFILE_RULES,
        {
            "id": "side-effects-in-core",
            "description": "Side effects in core modules need attention",
            "when": {
                "evidence_contains": ["side-effect"],
                "path_matches": ["src/services/**", "src/core/**", "src/lib/**"],
            },
            "then": {
                "severity": "warning",
                "actions": [
                    {"type": "refactor", "text": "Isolate side-effects for testability"},
                    {"type": "test", "text": "Add integration tests"},
                ],
            },
        },
        {
            "id": "network-calls",
            "description": "Network calls in modified files",
            "when": {"evidence_tags": ["side-effect"]},
            "then": {
                "severity": "info",
                "actions": [
                    {"type": "review", "text": "Review error handling and timeouts"},
                    {"type": "test", "text": "Add tests with mocked network calls"},
                ],
            },
        },
    ],
}


def baseline_rules() -> tuple[Rule, ...]:
    return parse_rules(BASELINE_RULES, section="baseline")


def profile_rules(profile: str) -> tuple[Rule, ...]:
    if profile not in VALID_PROFILES:
        raise ConfigError(f"Unknown profile {profile!r}; expected one of: {', '.join(sorted(VALID_PROFILES))}")
    return parse_rules(PROFILE_RULES[profile], section=f"profiles.{profile}")


def compose_rules(
    profile: str,
    custom_rules: tuple[Rule, ...] = (),
    *,
    fail_threshold: float | None = None,
    warn_threshold: float | None = None,
) -> tuple[Rule, ...]:
    """Merge baseline, profile and custom rules by id, in that order.

    A later rule with an existing id replaces the earlier one in place.
    Configured thresholds prepend their own rules so they are tried first.
    """
    merged: dict[str, Rule] = {}
    for rule in (*baseline_rules(), *profile_rules(profile), *custom_rules):
        merged[rule.id] = rule

    prefix: list[Rule] = []
    if fail_threshold is not None:
        prefix.append(
            Rule(
                id=CONFIG_FAIL_RULE_ID,
                when=RuleCondition(risk_gte=fail_threshold),
                severity="blocker",
                description=f"Risk at or above the configured fail threshold {fail_threshold}",
            )
        )
    if warn_threshold is not None:
        prefix.append(
            Rule(
                id=CONFIG_WARN_RULE_ID,
                when=RuleCondition(risk_gte=warn_threshold),
                severity="warning",
                description=f"Risk at or above the configured warn threshold {warn_threshold}",
            )
        )
    prefix_ids = {rule.id for rule in prefix}
    return (*prefix, *(rule for rule in merged.values() if rule.id not in prefix_ids))
