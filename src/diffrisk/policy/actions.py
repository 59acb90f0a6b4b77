"""Follow-up actions attached to rule results."""

from __future__ import annotations

from diffrisk.constants.policy import (
    HEURISTIC_DEFAULT_ACTION,
    HEURISTIC_DEFAULT_PRIORITY,
    HEURISTIC_REVIEW_MIN_BLAST,
    HEURISTIC_SIGNAL_ACTIONS,
    HEURISTIC_SIGNAL_PRIORITY,
    HEURISTIC_TEST_MIN_RISK,
)
from diffrisk.model import ActionMapping, AnalyzedFile, RuleAction
from diffrisk.utils.globs import glob_match, normalize_path

SECURITY_REVIEWERS: tuple[str, ...] = ("@security-team",)

DEFAULT_ACTION_MAPPINGS: tuple[tuple[str, tuple[RuleAction, ...]], ...] = (
    (
        "**/auth/**",
        (
            RuleAction("test", "Run auth tests", command='npm test -- --grep "auth"', priority=1),
            RuleAction("review", "Request security review", reviewers=SECURITY_REVIEWERS, priority=2),
        ),
    ),
    (
        "**/security/**",
        (
            RuleAction("test", "Run security tests", command='npm test -- --grep "security"', priority=1),
            RuleAction("review", "Request security review", reviewers=SECURITY_REVIEWERS, priority=2),
        ),
    ),
    (
        "**/payment*/**",
        (
            RuleAction("test", "Run payment tests", command='npm test -- --grep "payment"', priority=1),
            RuleAction("verify", "Verify idempotency and retry logic", priority=2),
            RuleAction("review", "Request payment team review", reviewers=("@payments-team",), priority=3),
        ),
    ),
    (
        "**/api/**",
        (
            RuleAction("test", "Run API tests", command='npm test -- --grep "api"', priority=1),
            RuleAction("verify", "Check API contract compatibility", priority=2),
        ),
    ),
    (
        "**/routes/**",
        (RuleAction("test", "Run route tests", command='npm test -- --grep "route"', priority=1),),
    ),
    (
        "**/components/**",
        (
            RuleAction("test", "Run component tests", command='npm test -- --testPathPattern="components"', priority=1),
            RuleAction("check", "Check for effect dependency issues", priority=2),
        ),
    ),
    (
        "**/store/**",
        (
            RuleAction("test", "Run store tests", command='npm test -- --grep "store"', priority=1),
            RuleAction("verify", "Verify state mutation patterns", priority=2),
        ),
    ),
    (
        "**/redux/**",
        (RuleAction("test", "Run Redux tests", command='npm test -- --grep "redux"', priority=1),),
    ),
    (
        "**/models/**",
        (
            RuleAction("test", "Run model tests", command='npm test -- --grep "model"', priority=1),
            RuleAction("verify", "Check migration compatibility", priority=2),
        ),
    ),
    (
        "**/migrations/**",
        (
            RuleAction("review", "Request DBA review for migrations", reviewers=("@database-team",), priority=1),
            RuleAction("verify", "Test migration rollback", priority=2),
        ),
    ),
    (
        "**/middleware/**",
        (
            RuleAction("test", "Run middleware tests", command='npm test -- --grep "middleware"', priority=1),
            RuleAction("verify", "Check middleware order and side effects", priority=2),
        ),
    ),
    (
        "**/utils/**",
        (RuleAction("test", "Run utility tests", command='npm test -- --testPathPattern="utils"', priority=1),),
    ),
    (
        "**/helpers/**",
        (RuleAction("test", "Run helper tests", command='npm test -- --testPathPattern="helpers"', priority=1),),
    ),
)


def mapping_actions(mapping: ActionMapping) -> tuple[RuleAction, ...]:
    """Expand a configured mapping into concrete actions."""
    actions: list[RuleAction] = [
        RuleAction("test", f"Run: {command}", command=command, priority=1) for command in mapping.commands
    ]
    if mapping.reviewers:
        actions.append(
            RuleAction(
                "review",
                f"Request review from {', '.join(mapping.reviewers)}",
                reviewers=mapping.reviewers,
                priority=2,
            )
        )
    if mapping.notes:
        actions.append(RuleAction("document", mapping.notes, priority=3))
    return tuple(actions)


def mapped_actions(path: str, custom_mappings: tuple[ActionMapping, ...] = ()) -> tuple[RuleAction, ...]:
    """Actions from configured mappings, then built-in ones, by priority.

    A built-in action repeating the type and text of an earlier one is skipped.
    """
    matched: list[RuleAction] = []
    for mapping in custom_mappings:
        if glob_match(path, mapping.pattern):
            matched.extend(mapping_actions(mapping))

    for pattern, actions in DEFAULT_ACTION_MAPPINGS:
        if not glob_match(path, pattern):
            continue
        for action in actions:
            if not any(existing.type == action.type and existing.text == action.text for existing in matched):
                matched.append(action)

    return tuple(sorted(matched, key=lambda action: action.priority))


def _folder_name(path: str) -> str | None:
    parts = normalize_path(path).split("/")
    # First directory below the top-level one, e.g. ``src/<folder>/file.ts``.
    if len(parts) >= 3:
        return parts[1]
    return None


def heuristic_actions(file: AnalyzedFile) -> tuple[RuleAction, ...]:
    """Fallback actions from risk, blast radius and specific signals."""
    actions: list[RuleAction] = []
    folder = _folder_name(file.path)

    if file.risk_score >= HEURISTIC_TEST_MIN_RISK:
        if folder:
            command = f'npm test -- --grep "{folder}"'
            actions.append(RuleAction("test", f"Run tests: {command}", command=command, priority=1))
        else:
            actions.append(RuleAction("test", "Run related tests", priority=1))

    if file.blast_radius.total >= HEURISTIC_REVIEW_MIN_BLAST:
        actions.append(
            RuleAction(
                "review",
                f"Request review ({file.blast_radius.total} files depend on this)",
                priority=2,
            )
        )

    signal_ids = set(file.signal_ids)
    for signal_id, (action_type, text) in HEURISTIC_SIGNAL_ACTIONS.items():
        if signal_id in signal_ids:
            actions.append(RuleAction(action_type, text, priority=HEURISTIC_SIGNAL_PRIORITY))  # type: ignore[arg-type]

    if not actions:
        actions.append(RuleAction("review", HEURISTIC_DEFAULT_ACTION, priority=HEURISTIC_DEFAULT_PRIORITY))
    return tuple(actions)


def actions_for(
    file: AnalyzedFile,
    rule_actions: tuple[RuleAction, ...] | None,
    custom_mappings: tuple[ActionMapping, ...] = (),
) -> tuple[RuleAction, ...]:
    """Rule actions when given, else mapped actions, else heuristics."""
    if rule_actions is not None:
        return rule_actions
    mapped = mapped_actions(file.path, custom_mappings)
    if mapped:
        return mapped
    return heuristic_actions(file)


def format_action(action: RuleAction) -> str:
    """One action as a short line for terminal output."""
    if action.command:
        return f"Run: {action.command}"
    if action.reviewers:
        return f"Review: {', '.join(action.reviewers)}"
    return action.text
