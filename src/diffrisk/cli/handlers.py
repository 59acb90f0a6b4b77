"""CLI subcommand handlers."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from diffrisk.config import DiffRiskConfig, load_config
from diffrisk.exceptions import ConfigError, DiffRiskError, InputError, SuppressionError
from diffrisk.exceptions.validation import format_errors
from diffrisk.model import SuppressionEntry
from diffrisk.reporting import StdoutReporter, render_report_json, write_report
from diffrisk.scanner.cache import AnalysisCache
from diffrisk.scanner.determinism import compare_determinism_results, format_determinism_result
from diffrisk.scanner.orchestrator import default_suppression_manager, run_determinism_check, run_evaluation
from diffrisk.suppressions import SuppressionManager
from diffrisk.validation import preflight_validate


def handle_evaluate(args: argparse.Namespace) -> int:
    errors = preflight_validate(root=args.root, config_path=args.config)
    if errors:
        print(format_errors(errors), file=sys.stderr)
        return 2

    try:
        outcome = run_evaluation(
            root=args.root,
            snapshot_path=args.input,
            config_path=args.config,
            profile=args.profile,
            base=args.base,
            show_all=args.show_all,
            limit=args.top,
            no_cache=args.no_cache,
            include_tests=args.include_tests,
            include_config=args.include_config,
        )
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except InputError as exc:
        print(f"Input error: {exc}", file=sys.stderr)
        return 2
    except DiffRiskError as exc:
        print(f"Evaluation error: {exc}", file=sys.stderr)
        return 2

    if args.output is not None:
        write_report(args.output, outcome.report)
    if args.json:
        print(render_report_json(outcome.report))
    else:
        use_color = not args.no_color and sys.stdout.isatty()
        print(StdoutReporter(outcome.report, color=use_color, verbose=args.verbose).render())
        if args.verbose and outcome.cached:
            print("  (cached result)")
    if args.determinism_check:
        return _check_determinism(args, outcome.exit_code)
    return outcome.exit_code


def _check_determinism(args: argparse.Namespace, exit_code: int) -> int:
    try:
        first, second = run_determinism_check(
            root=args.root,
            snapshot_path=args.input,
            config_path=args.config,
            profile=args.profile,
            base=args.base,
            show_all=args.show_all,
            limit=args.top,
            include_tests=args.include_tests,
            include_config=args.include_config,
        )
    except DiffRiskError as exc:
        print(f"Evaluation error: {exc}", file=sys.stderr)
        return 2

    print(f"Determinism run 1: {format_determinism_result(first)}", file=sys.stderr)
    print(f"Determinism run 2: {format_determinism_result(second)}", file=sys.stderr)
    differences = compare_determinism_results(first, second)
    if differences:
        print(f"Determinism check failed: {', '.join(differences)} differ", file=sys.stderr)
        return 2
    print("Determinism check passed.", file=sys.stderr)
    return exit_code


def handle_validate_config(args: argparse.Namespace) -> int:
    errors = preflight_validate(root=args.root, config_path=args.config)
    if errors:
        print(format_errors(errors), file=sys.stderr)
        return 2

    print("Configuration is valid.")
    return 0


def _load_config_or_report(args: argparse.Namespace) -> DiffRiskConfig | None:
    try:
        return load_config(args.root, args.config)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return None


def _manager(args: argparse.Namespace, config: DiffRiskConfig) -> SuppressionManager:
    return default_suppression_manager(args.root.resolve(), config)


def _describe(entry: SuppressionEntry) -> str:
    parts = [entry.signal_id]
    if entry.file_glob:
        parts.append(f"in {entry.file_glob}")
    if entry.expires_at is not None:
        parts.append(f"until {entry.expires_at.isoformat()}")
    if entry.reason:
        parts.append(f"({entry.reason})")
    return " ".join(parts)


def handle_suppress(args: argparse.Namespace) -> int:
    config = _load_config_or_report(args)
    if config is None:
        return 2
    manager = _manager(args, config)

    try:
        if args.suppress_command == "add":
            entry = manager.add(
                args.signal_id,
                scope=args.scope,
                file_glob=args.glob,
                reason=args.reason,
                expires_in=args.expires,
                force=args.force,
            )
            print(f"Added {args.scope} suppression: {_describe(entry)}")
        elif args.suppress_command == "remove":
            entry = manager.remove(args.signal_id, scope=args.scope, file_glob=args.glob)
            print(f"Removed {args.scope} suppression: {_describe(entry)}")
        elif args.suppress_command == "list":
            listing = manager.list_entries()
            sections = (
                ("Local", listing.local),
                ("Global", listing.global_),
                ("Expired (local)", listing.expired_local),
                ("Expired (global)", listing.expired_global),
            )
            for title, entries in sections:
                if not entries:
                    continue
                print(f"{title}:")
                for entry in entries:
                    print(f"  {_describe(entry)}")
            if not any(entries for _, entries in sections):
                print("No suppressions.")
        else:
            removed = manager.clean()
            print(f"Removed {removed} expired suppression(s).")
    except SuppressionError as exc:
        print(f"Suppression error: {exc}", file=sys.stderr)
        return 2
    return 0


def handle_cache(args: argparse.Namespace) -> int:
    config = _load_config_or_report(args)
    if config is None:
        return 2
    cache = AnalysisCache(Path(args.root).resolve(), config.cache)
    if args.cache_command == "clear":
        removed = cache.clear()
        print(f"Cleared {removed} cache entr{'y' if removed == 1 else 'ies'}.")
        return 0
    stats = cache.stats()
    print(f"Cache directory: {cache.directory}")
    print(f"Entries: {stats['entries']}")
    print(f"Size: {stats['size_bytes']} bytes")
    return 0
