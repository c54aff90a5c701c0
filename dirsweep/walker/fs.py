"""Lazy directory listing primitives for the tree walker."""

from __future__ import annotations

import enum
import os
from collections.abc import Iterator
from dataclasses import dataclass


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class Entry:
    """One directory-read result, valid for the duration of a callback."""

    parent_path: str
    name: str
    kind: EntryKind

    @property
    def path(self) -> str:
        return child_path(self.parent_path, self.name)

    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


def child_path(parent: str, name: str) -> str:
    """Join ``parent`` and ``name`` without doubling a root separator."""
    return os.path.join(parent, name)


def entry_kind(dir_entry: os.DirEntry) -> EntryKind:
    """Classify a scandir entry without following symlinks."""
    try:
        if dir_entry.is_dir(follow_symlinks=False):
            return EntryKind.DIRECTORY
        if dir_entry.is_file(follow_symlinks=False):
            return EntryKind.FILE
    except OSError:
        pass
    return EntryKind.OTHER


def iter_directory_entries(path: str) -> Iterator[Entry]:
    """Yield entries of ``path`` one at a time.

    The directory stream stays open until the generator is exhausted or
    closed. ``OSError`` from opening or reading the stream propagates to the
    consumer.
    """
    with os.scandir(path) as entries:
        for dir_entry in entries:
            yield Entry(parent_path=path, name=dir_entry.name, kind=entry_kind(dir_entry))


__all__ = [
    "Entry",
    "EntryKind",
    "child_path",
    "entry_kind",
    "iter_directory_entries",
]
