"""Bounded-concurrency directory tree walking.

- lazy entry listing primitives (``fs``)
- the ``FileWalker`` scheduler with entry/complete/error notifications
"""

from __future__ import annotations

from .file_walker import DEFAULT_CONCURRENCY_LIMIT, FileWalker, WalkTask
from .fs import Entry, EntryKind, child_path, entry_kind, iter_directory_entries

__all__ = [
    "DEFAULT_CONCURRENCY_LIMIT",
    "Entry",
    "EntryKind",
    "FileWalker",
    "WalkTask",
    "child_path",
    "entry_kind",
    "iter_directory_entries",
]
