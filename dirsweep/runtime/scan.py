"""Walker consumers: target-directory search and tree size measurement."""

from __future__ import annotations

import logging
import os
import stat
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from ..walker import DEFAULT_CONCURRENCY_LIMIT, Entry, FileWalker, iter_directory_entries
from ..walker.file_walker import ListEntries

logger = logging.getLogger(__name__)

DEFAULT_TARGET_NAME = "node_modules"

StatPath = Callable[[str], os.stat_result]


def _as_roots(roots: str | os.PathLike[str] | Iterable[str | os.PathLike[str]]) -> list[str]:
    if isinstance(roots, (str, os.PathLike)):
        return [os.fspath(roots)]
    return [os.fspath(root) for root in roots]


def explore(
    roots: str | os.PathLike[str] | Iterable[str | os.PathLike[str]],
    target_name: str,
    on_match: Callable[[str], None],
    *,
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    list_entries: ListEntries = iter_directory_entries,
    on_complete: Callable[[], None] | None = None,
    on_directory_error: Callable[[str, Exception], None] | None = None,
) -> FileWalker:
    """Start searching ``roots`` for directories named ``target_name``.

    Matches are reported through ``on_match`` and never descended into.
    Returns the running walker; call ``wait()`` on it to block. Overlapping
    roots are walked independently.
    """
    if not target_name:
        raise ValueError("target_name must be non-empty")
    root_paths = _as_roots(roots)
    if not root_paths:
        raise ValueError("at least one root path is required")
    walker = FileWalker(concurrency_limit=concurrency_limit, list_entries=list_entries)

    def handle_entry(entry: Entry) -> None:
        if not entry.is_dir():
            return
        if entry.name == target_name:
            on_match(entry.path)
        else:
            walker.enqueue(entry.path)

    walker.on_entry(handle_entry)
    if on_directory_error is not None:
        walker.on_directory_error(on_directory_error)
    if on_complete is not None:
        walker.on_complete(on_complete)
    walker.enqueue_all(root_paths)
    return walker


def find_matches(
    roots: str | os.PathLike[str] | Iterable[str | os.PathLike[str]],
    target_name: str = DEFAULT_TARGET_NAME,
    *,
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    list_entries: ListEntries = iter_directory_entries,
    timeout: float | None = None,
) -> list[Path]:
    """Blocking search returning every match path, sorted."""
    lock = threading.Lock()
    matches: list[Path] = []

    def on_match(path: str) -> None:
        with lock:
            matches.append(Path(path))

    walker = explore(
        roots,
        target_name,
        on_match,
        concurrency_limit=concurrency_limit,
        list_entries=list_entries,
    )
    if not walker.wait(timeout):
        raise TimeoutError(f"search did not finish within {timeout} seconds")
    with lock:
        return sorted(matches)


def measure_size(
    root: str | os.PathLike[str],
    *,
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    list_entries: ListEntries = iter_directory_entries,
    stat_path: StatPath = os.lstat,
    timeout: float | None = None,
) -> int:
    """Return total bytes of regular files under ``root``.

    Symlinks are neither followed nor counted. Files that disappear between
    listing and stat are skipped, and a missing ``root`` measures ``0``.
    """
    root_path = os.fspath(root)
    try:
        root_stat = stat_path(root_path)
    except FileNotFoundError:
        return 0
    if stat.S_ISREG(root_stat.st_mode):
        return int(root_stat.st_size)

    lock = threading.Lock()
    total = 0
    walker = FileWalker(concurrency_limit=concurrency_limit, list_entries=list_entries)

    def handle_entry(entry: Entry) -> None:
        nonlocal total
        if entry.is_dir():
            walker.enqueue(entry.path)
            return
        if not entry.is_file():
            return
        try:
            size = int(stat_path(entry.path).st_size)
        except OSError as exc:
            logger.debug("skipping size of %s: %s", entry.path, exc)
            return
        with lock:
            total += size

    walker.on_entry(handle_entry)
    walker.enqueue(root_path)
    if not walker.wait(timeout):
        raise TimeoutError(f"size measurement did not finish within {timeout} seconds")
    with lock:
        return total


__all__ = [
    "DEFAULT_TARGET_NAME",
    "explore",
    "find_matches",
    "measure_size",
]
