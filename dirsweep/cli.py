"""Command-line front door for dirsweep.

Parses CLI options, resolves scan roots, and finds target directories.
Optionally measures and deletes them with the selected strategy.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .runtime import config
from .runtime.scan import find_matches, measure_size
from .strategies import (
    DeletionStrategy,
    RemovalOutcome,
    available_strategy_names,
    select_deletion_strategy,
    strategy_by_name,
)

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def format_size(num_bytes: int) -> str:
    """Render a byte count with a binary unit, e.g. ``1.5 MB``."""
    size = float(num_bytes)
    if size < 1024:
        return f"{num_bytes} B"
    for unit in ("KB", "MB"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f} {unit}"
    size /= 1024
    return f"{size:.1f} GB"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def _save_defaults(target: str | None, workers: int | None, strategy_name: str | None) -> None:
    """Persist explicitly passed options; omitted ones keep their stored value."""
    if target:
        config.save_target_name(target)
    if workers is not None:
        config.save_concurrency_limit(workers)
    if strategy_name is not None:
        config.save_deletion_strategy_name(strategy_name)
    logger.info("saved defaults to %s", config.CONFIG_PATH)


def _resolve_strategy(name: str | None) -> DeletionStrategy:
    strategy = strategy_by_name(name) if name is not None else select_deletion_strategy()
    if not strategy.is_supported():
        raise SystemExit(f"Deletion strategy not supported on this platform: {strategy.name}")
    return strategy


def run(
    roots: list[Path],
    target_name: str,
    concurrency_limit: int,
    show_sizes: bool,
    delete: bool,
    strategy: DeletionStrategy | None,
) -> int:
    """Scan ``roots`` and print matches; return the process exit status."""
    matches = find_matches(roots, target_name, concurrency_limit=concurrency_limit)
    total_bytes = 0
    failures = 0
    for match in matches:
        line = str(match)
        if show_sizes:
            size = measure_size(match, concurrency_limit=concurrency_limit)
            total_bytes += size
            line = f"{line}  {format_size(size)}"
        if delete and strategy is not None:
            try:
                outcome = strategy.remove(match)
            except OSError as exc:
                failures += 1
                logger.warning("failed to remove %s: %s", match, exc)
                line = f"{line}  [failed]"
            else:
                line = f"{line}  [{'deleted' if outcome is RemovalOutcome.REMOVED else 'gone'}]"
        sys.stdout.write(line + "\n")

    summary = f"{len(matches)} {target_name} director{'y' if len(matches) == 1 else 'ies'} found"
    if show_sizes:
        summary += f", {format_size(total_bytes)} total"
    if failures:
        summary += f", {failures} failed to delete"
    sys.stdout.write(summary + "\n")
    return 1 if failures else 0


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and scan the given roots.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is scanned. Flags override persisted config values.
    """
    parser = argparse.ArgumentParser(
        description="Find (and optionally delete) dependency-cache directories such as node_modules."
    )
    parser.add_argument("paths", nargs="*", help="Roots to scan. Defaults to current directory.")
    parser.add_argument("--target", default=None, help="Directory name to look for (default: node_modules).")
    parser.add_argument("--workers", type=_positive_int, default=None, help="Maximum concurrent directory listings.")
    parser.add_argument("--sizes", action="store_true", help="Measure the size of each match.")
    parser.add_argument("--delete", action="store_true", help="Delete every match after listing it.")
    parser.add_argument(
        "--strategy",
        choices=available_strategy_names(),
        default=None,
        help="Force a deletion strategy (default: chosen per platform).",
    )
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Persist the given --target, --workers and --strategy as defaults.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log skipped directories and files.")
    args = parser.parse_args()

    _configure_logging(args.verbose)

    if args.save_defaults:
        _save_defaults(args.target, args.workers, args.strategy)

    if default_path is None:
        default_path = Path.cwd()
    roots = [Path(raw) for raw in args.paths] or [default_path]
    for root in roots:
        if not root.exists():
            raise SystemExit(f"Path not found: {root}")

    target_name = args.target or config.load_target_name()
    concurrency_limit = args.workers or config.load_concurrency_limit()
    strategy = None
    if args.delete:
        strategy = _resolve_strategy(args.strategy or config.load_deletion_strategy_name())

    status = run(roots, target_name, concurrency_limit, args.sizes, args.delete, strategy)
    if status:
        raise SystemExit(status)


if __name__ == "__main__":
    main()
