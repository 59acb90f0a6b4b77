"""End-to-end evaluation of a detector snapshot.

``evaluate_snapshot`` is the pure core: suppress, gate, score, measure blast
radius, apply policy, then pick the Top-N.  ``run_evaluation`` wraps it with
config loading, suppression stores, the report cache and determinism hashes.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from diffrisk import __version__
from diffrisk.config import DiffRiskConfig, config_fingerprint, load_config, read_config_text
from diffrisk.constants.policy import VALID_PROFILES
from diffrisk.exceptions import ConfigError, InputError
from diffrisk.io import canonical_json
from diffrisk.model import AnalyzedFile, EvaluationResult, TopNResult
from diffrisk.policy import evaluate_rules, select_top_n
from diffrisk.scanner.cache import AnalysisCache, build_cache_key
from diffrisk.scanner.determinism import (
    DeterminismInput,
    DeterminismResult,
    check_determinism,
    compute_input_hash,
    compute_output_hash,
)
from diffrisk.scanner.discovery import read_sources
from diffrisk.scanner.gate import gate
from diffrisk.scanner.graph import (
    DependencyGraph,
    blast_radius,
    build_graph,
    empty_blast_radius,
    extract_imports,
    fallback_blast_radius,
)
from diffrisk.scanner.ignore import IgnoreExplanation, explain_ignore
from diffrisk.scanner.pipeline.cache_utils import build_key_components, read_head_sha
from diffrisk.scanner.pipeline.conversion import FileSnapshot, build_analyzed_file, load_snapshot
from diffrisk.scanner.score import score_signals
from diffrisk.suppressions import SuppressionManager, SuppressionSet
from diffrisk.suppressions.store import JsonSuppressionStore, default_global_path, default_local_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationRun:
    files: tuple[AnalyzedFile, ...]
    evaluation: EvaluationResult
    top_n: TopNResult
    blocker_threshold: float
    warnings: tuple[str, ...] = ()
    ignored: tuple[IgnoreExplanation, ...] = ()


@dataclass(frozen=True)
class EvaluationOutcome:
    """What the CLI needs after a run, whether or not it came from cache."""

    report: dict[str, Any]
    exit_code: int
    cached: bool
    warnings: tuple[str, ...] = ()


def _import_map(
    files: tuple[FileSnapshot, ...],
    root: Path | None,
    warnings: list[str],
) -> dict[str, list[str]]:
    """Import specifiers per path: repository sources overlaid by the snapshot."""
    imports: dict[str, list[str]] = {}
    if root is not None:
        for path, content in read_sources(root, warnings).items():
            imports[path] = extract_imports(content)
    for file in files:
        if file.imports is not None:
            imports[file.path] = list(file.imports)
        elif file.source is not None:
            imports[file.path] = extract_imports(file.source)
        else:
            imports.setdefault(file.path, [])
    return imports


def evaluate_snapshot(
    files: tuple[FileSnapshot, ...] | list[FileSnapshot],
    *,
    config: DiffRiskConfig | None = None,
    suppressions: SuppressionSet | None = None,
    root: Path | None = None,
    now: datetime | None = None,
    show_all: bool = False,
    limit: int | None = None,
    min_risk: float = 0.0,
    group_by_severity: bool = True,
) -> EvaluationRun:
    """Evaluate one snapshot of changed files against config and suppressions."""
    config = config or DiffRiskConfig()
    suppressions = suppressions or SuppressionSet()
    now = now or datetime.now(UTC)
    warnings: list[str] = list(suppressions.warnings)

    seen: set[str] = set()
    for file in files:
        if file.path in seen:
            raise InputError(f"Duplicate file in snapshot: {file.path}")
        seen.add(file.path)

    rules = config.effective_rules
    threshold = config.blocker_threshold
    included: list[FileSnapshot] = []
    ignored: list[IgnoreExplanation] = []
    for file in files:
        explanation = explain_ignore(file.path, config.ignore)
        if explanation is None:
            included.append(file)
        else:
            ignored.append(explanation)
    if ignored:
        logger.info("Ignored %d of %d changed file(s)", len(ignored), len(files))
    ordered = sorted(included, key=lambda file: file.path)

    mode = config.blast_radius_mode
    imports: dict[str, list[str]] = {}
    graph: DependencyGraph | None = None
    if mode in ("graph", "fallback"):
        imports = _import_map(tuple(ordered), root, warnings)
    if mode == "graph":
        graph = build_graph(imports)
        logger.debug("Import graph: %d nodes", len(graph.dependencies))

    analyzed: list[AnalyzedFile] = []
    for file in ordered:
        kept, suppressed = suppressions.apply(file.path, file.signals, now)
        if suppressed:
            counts = suppressions.stats(kept, suppressed)
            logger.info(
                "Suppressed %d of %d signal(s) in %s (%d local, %d global)",
                counts["suppressed"],
                counts["total"],
                file.path,
                counts["local"],
                counts["global_"],
            )
        gated = gate(kept)
        breakdown = score_signals(gated, blocker_threshold=threshold)
        if graph is not None:
            radius = blast_radius(file.path, graph)
        elif mode == "fallback":
            radius = fallback_blast_radius(file.path, imports)
        else:
            radius = empty_blast_radius()
        analyzed.append(
            build_analyzed_file(
                file.path,
                gated=gated,
                breakdown=breakdown,
                radius=radius,
                suppressed=suppressed,
            )
        )

    evaluation = evaluate_rules(
        analyzed,
        rules,
        exceptions=config.exceptions,
        action_mappings=config.action_mappings,
        now=now,
    )
    top_n = select_top_n(
        evaluation,
        limit=limit if limit is not None else config.top_n,
        show_all=show_all,
        min_risk=min_risk,
        group_by_severity=group_by_severity,
    )
    return EvaluationRun(
        files=tuple(analyzed),
        evaluation=evaluation,
        top_n=top_n,
        blocker_threshold=threshold,
        warnings=tuple(warnings),
        ignored=tuple(sorted(ignored, key=lambda item: item.path)),
    )


def default_suppression_manager(root: Path, config: DiffRiskConfig, home: Path | None = None) -> SuppressionManager:
    local_path = (
        root / config.local_suppressions_path if config.local_suppressions_path else default_local_path(root)
    )
    return SuppressionManager(
        JsonSuppressionStore(local_path),
        JsonSuppressionStore(default_global_path(home)),
    )


def run_evaluation(
    *,
    root: Path,
    snapshot_path: Path,
    config_path: Path | None = None,
    profile: str | None = None,
    base: str = "HEAD",
    scope: str = "working",
    show_all: bool = False,
    limit: int | None = None,
    no_cache: bool = False,
    include_tests: bool = False,
    include_config: bool = False,
    manager: SuppressionManager | None = None,
    now: datetime | None = None,
) -> EvaluationOutcome:
    """Load inputs, evaluate with caching, and build the JSON report."""
    from diffrisk.reporting.json_report import build_report

    started_at = time.perf_counter()
    root = root.resolve()
    if not root.is_dir():
        raise ConfigError(f"Root does not exist or is not a directory: {root}")

    config = load_config(root, config_path)
    if profile is not None:
        if profile not in VALID_PROFILES:
            raise ConfigError(f"Unknown profile {profile!r}; expected one of {', '.join(sorted(VALID_PROFILES))}")
        config = replace(config, profile=profile)
    if no_cache:
        config = replace(config, cache=replace(config.cache, enabled=False))
    if include_tests or include_config:
        config = replace(
            config,
            ignore=replace(
                config.ignore,
                include_tests=include_tests or config.ignore.include_tests,
                include_config=include_config or config.ignore.include_config,
            ),
        )

    snapshot = load_snapshot(snapshot_path)
    manager = manager or default_suppression_manager(root, config)
    suppressions = manager.load()
    warnings: list[str] = []

    diff_content = snapshot.diff if snapshot.diff is not None else _snapshot_fingerprint_text(snapshot_path)
    options = {
        "show_all": show_all,
        "limit": limit if limit is not None else config.top_n,
        "base": base,
        "include_tests": config.ignore.include_tests,
        "include_config": config.ignore.include_config,
    }
    input_hash = compute_input_hash(
        DeterminismInput(
            diff_content=diff_content,
            config_text=read_config_text(root, config_path),
            profile=config.profile,
            options=options,
        )
    )

    cache = AnalysisCache(root, config.cache)
    components = build_key_components(
        root=root,
        head_sha=read_head_sha(root, warnings) if config.cache.enabled else "",
        base=snapshot.base or base,
        scope=f"{scope}:{canonical_json(options)}",
        tool_version=__version__,
        config_hash=config_fingerprint(config),
        diff_content=diff_content,
        suppressions_hash=suppressions.content_hash(),
    )
    key = build_cache_key(components)

    cached = cache.get(key, now=now)
    if isinstance(cached, dict) and isinstance(cached.get("exit_code"), int):
        logger.info("Cache hit for %s", key)
        # Store warnings are not part of the key; a malformed store hashes like an empty one.
        warnings.extend(suppressions.warnings)
        reported = list(cached.get("warnings", []))
        reported.extend(warning for warning in warnings if warning not in reported)
        return EvaluationOutcome(
            report={**cached, "warnings": reported},
            exit_code=cached["exit_code"],
            cached=True,
            warnings=tuple(warnings),
        )

    run = evaluate_snapshot(
        snapshot.files,
        config=config,
        suppressions=suppressions,
        root=root,
        now=now,
        show_all=show_all,
        limit=limit,
    )
    warnings.extend(run.warnings)
    duration_ms = int((time.perf_counter() - started_at) * 1000)
    report = build_report(
        run,
        config=config,
        input_hash=input_hash,
        duration_ms=duration_ms,
        timestamp=(now or datetime.now(UTC)).isoformat(),
        warnings=tuple(warnings),
    )
    report["determinism"]["output_hash"] = compute_output_hash(canonical_json(report))

    if config.cache.enabled:
        cache.set(key, report, components=components, compute_time_ms=duration_ms, now=now)
        cache.cleanup()
    return EvaluationOutcome(
        report=report,
        exit_code=run.evaluation.exit_code,
        cached=False,
        warnings=tuple(warnings),
    )


def run_determinism_check(
    *,
    root: Path,
    snapshot_path: Path,
    config_path: Path | None = None,
    profile: str | None = None,
    base: str = "HEAD",
    show_all: bool = False,
    limit: int | None = None,
    include_tests: bool = False,
    include_config: bool = False,
    manager: SuppressionManager | None = None,
) -> tuple[DeterminismResult, DeterminismResult]:
    """Evaluate twice with the cache off and hash each run.

    Each run gets its own wall clock, so differing results point at state
    leaking into the report rather than at timestamps.
    """
    data = DeterminismInput(
        diff_content=_snapshot_fingerprint_text(snapshot_path),
        config_text=read_config_text(root.resolve(), config_path),
        profile=profile or "",
        options={
            "show_all": show_all,
            "limit": limit,
            "base": base,
            "include_tests": include_tests,
            "include_config": include_config,
        },
    )

    def evaluate(_: DeterminismInput) -> tuple[str, dict[str, int]]:
        outcome = run_evaluation(
            root=root,
            snapshot_path=snapshot_path,
            config_path=config_path,
            profile=profile,
            base=base,
            show_all=show_all,
            limit=limit,
            no_cache=True,
            include_tests=include_tests,
            include_config=include_config,
            manager=manager,
        )
        summary = outcome.report["summary"]
        counts = {
            "blockers": summary["blockers"],
            "warnings": summary["warnings"],
            "infos": summary["infos"],
            "exit_code": outcome.exit_code,
        }
        return canonical_json(outcome.report), counts

    return check_determinism(data, evaluate), check_determinism(data, evaluate)


def _snapshot_fingerprint_text(snapshot_path: Path) -> str:
    try:
        return snapshot_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(f"Cannot read snapshot {snapshot_path}: {exc}") from exc

