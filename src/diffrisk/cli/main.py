"""CLI entrypoint for diffrisk."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from diffrisk import __version__
from diffrisk.cli.handlers import handle_cache, handle_evaluate, handle_suppress, handle_validate_config
from diffrisk.constants.branding import CLI_DESCRIPTION
from diffrisk.constants.policy import VALID_PROFILES


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    """Build top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="diffrisk",
        description=CLI_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate = subparsers.add_parser("evaluate", help="Evaluate a detector snapshot against policy")
    evaluate.add_argument("-r", "--root", type=Path, default=Path("."), help="Repository root path")
    evaluate.add_argument("-i", "--input", type=Path, required=True, help="Snapshot JSON from the detector layer")
    evaluate.add_argument("-c", "--config", type=Path, help="Explicit config file")
    evaluate.add_argument(
        "-p",
        "--profile",
        choices=sorted(VALID_PROFILES),
        default=None,
        help="Policy profile overriding the config file",
    )
    evaluate.add_argument("-b", "--base", default="HEAD", help="Base ref recorded in the cache key")
    evaluate.add_argument("-a", "--show-all", action="store_true", help="Show every result, not only the top N")
    evaluate.add_argument("-t", "--top", type=_positive_int, default=None, help="Number of results to show")
    evaluate.add_argument("-o", "--output", type=Path, default=None, help="Also write the JSON report here")
    evaluate.add_argument("--json", action="store_true", help="Print the JSON report instead of the summary")
    evaluate.add_argument("-n", "--no-cache", action="store_true", help="Disable cache reads/writes")
    evaluate.add_argument("--include-tests", action="store_true", help="Evaluate test files instead of ignoring them")
    evaluate.add_argument(
        "--include-config", action="store_true", help="Evaluate config files instead of ignoring them"
    )
    evaluate.add_argument("--no-color", action="store_true", help="Disable colored output")
    evaluate.add_argument("-v", "--verbose", action="store_true", help="Show timing and hashes")
    evaluate.add_argument(
        "--determinism-check",
        action="store_true",
        help="Evaluate twice without the cache and compare input/output hashes",
    )

    validate = subparsers.add_parser("validate-config", help="Validate configuration without evaluating")
    validate.add_argument("-r", "--root", type=Path, default=Path("."), help="Repository root path")
    validate.add_argument("-c", "--config", type=Path, help="Explicit config file")

    suppress = subparsers.add_parser("suppress", help="Manage signal suppressions")
    suppress.add_argument("-r", "--root", type=Path, default=Path("."), help="Repository root path")
    suppress.add_argument("-c", "--config", type=Path, help="Explicit config file")
    suppress_commands = suppress.add_subparsers(dest="suppress_command", required=True)

    add = suppress_commands.add_parser("add", help="Suppress a signal id or pattern")
    add.add_argument("signal_id", help="Signal id, `*`, or a `prefix-*` pattern")
    add.add_argument("--scope", choices=["local", "global"], default="local")
    add.add_argument("--glob", default=None, help="Only suppress in files matching this glob")
    add.add_argument("--reason", default=None, help="Why the signal is suppressed (required for security)")
    add.add_argument("--expires", default=None, help="Expiry duration such as 12h, 7d, 2w, 1m")
    add.add_argument("--force", action="store_true", help="Replace an existing entry with the same key")

    remove = suppress_commands.add_parser("remove", help="Remove a suppression")
    remove.add_argument("signal_id")
    remove.add_argument("--scope", choices=["local", "global"], default="local")
    remove.add_argument("--glob", default=None)

    suppress_commands.add_parser("list", help="List active and expired suppressions")
    suppress_commands.add_parser("clean", help="Delete expired suppressions")

    cache = subparsers.add_parser("cache", help="Inspect or clear the analysis cache")
    cache.add_argument("-r", "--root", type=Path, default=Path("."), help="Repository root path")
    cache.add_argument("-c", "--config", type=Path, help="Explicit config file")
    cache_commands = cache.add_subparsers(dest="cache_command", required=True)
    cache_commands.add_parser("clear", help="Delete every cache entry")
    cache_commands.add_parser("stats", help="Show cache size")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if args.command == "evaluate":
        return handle_evaluate(args)
    if args.command == "validate-config":
        return handle_validate_config(args)
    if args.command == "suppress":
        return handle_suppress(args)
    if args.command == "cache":
        return handle_cache(args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
