"""Config data model for diffrisk evaluations."""

from __future__ import annotations

from dataclasses import dataclass, field

from diffrisk.constants.config import CONFIG_VERSION
from diffrisk.constants.graph import DEFAULT_BLAST_RADIUS_MODE
from diffrisk.constants.policy import DEFAULT_PROFILE
from diffrisk.constants.topn import DEFAULT_TOP_N
from diffrisk.model import ActionMapping, PolicyException, Rule
from diffrisk.policy.engine import effective_blocker_threshold
from diffrisk.policy.profiles import compose_rules
from diffrisk.scanner.cache import CacheSettings
from diffrisk.scanner.ignore import IgnoreSettings
from diffrisk.types import BlastRadiusMode


@dataclass(frozen=True)
class DiffRiskConfig:
    """Resolved evaluation config."""

    version: int = CONFIG_VERSION
    profile: str = DEFAULT_PROFILE
    fail_threshold: float | None = None
    warn_threshold: float | None = None
    top_n: int = DEFAULT_TOP_N
    rules: tuple[Rule, ...] = ()
    exceptions: tuple[PolicyException, ...] = ()
    action_mappings: tuple[ActionMapping, ...] = ()
    blast_radius_mode: BlastRadiusMode = DEFAULT_BLAST_RADIUS_MODE  # type: ignore[assignment]
    cache: CacheSettings = field(default_factory=CacheSettings)
    local_suppressions_path: str | None = None
    ignore: IgnoreSettings = field(default_factory=IgnoreSettings)

    @property
    def effective_rules(self) -> tuple[Rule, ...]:
        """Baseline, profile and custom rules plus threshold rules."""
        return compose_rules(
            self.profile,
            self.rules,
            fail_threshold=self.fail_threshold,
            warn_threshold=self.warn_threshold,
        )

    @property
    def blocker_threshold(self) -> float:
        """Risk score at which the most permissive blocker rule fires."""
        return effective_blocker_threshold(self.effective_rules)
