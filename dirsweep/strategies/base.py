"""Deletion-strategy contract, filesystem primitives, and error classifiers."""

from __future__ import annotations

import enum
import errno
import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

# rmdir reports a non-empty directory as either code depending on platform.
NOT_EMPTY_ERRNOS = frozenset({errno.ENOTEMPTY, errno.EEXIST})


class RemovalOutcome(enum.Enum):
    REMOVED = "removed"
    NOT_FOUND = "not-found"


def is_not_found(exc: OSError) -> bool:
    return isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT


def is_not_empty(exc: OSError) -> bool:
    return exc.errno in NOT_EMPTY_ERRNOS


def is_a_directory(exc: OSError) -> bool:
    return isinstance(exc, IsADirectoryError) or exc.errno == errno.EISDIR


@dataclass(frozen=True)
class FilesystemOps:
    """Filesystem primitives used by deletion strategies.

    Defaults to the ``os`` module; tests swap in instrumented callables.
    """

    lstat: Callable[[str], os.stat_result] = os.lstat
    listdir: Callable[[str], list[str]] = os.listdir
    unlink: Callable[[str], None] = os.unlink
    rmdir: Callable[[str], None] = os.rmdir


class DeletionStrategy(ABC):
    """Removes a file or a whole directory subtree.

    ``remove`` returns an outcome for success cases and raises ``OSError`` for
    anything fatal. Removing a path that does not exist is a success.
    """

    name: str = ""

    @abstractmethod
    def remove(self, path: str | os.PathLike[str]) -> RemovalOutcome:
        raise NotImplementedError

    @abstractmethod
    def is_supported(self) -> bool:
        raise NotImplementedError


__all__ = [
    "DeletionStrategy",
    "FilesystemOps",
    "NOT_EMPTY_ERRNOS",
    "RemovalOutcome",
    "is_a_directory",
    "is_not_empty",
    "is_not_found",
]
