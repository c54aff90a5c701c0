"""``shutil.rmtree``-backed deletion for platforms with sane directory removal."""

from __future__ import annotations

import os
import shutil
import stat
import sys

from .base import DeletionStrategy, RemovalOutcome, is_not_found


def _raise_unless_missing(_function, _path, exc: BaseException) -> None:
    if isinstance(exc, OSError) and is_not_found(exc):
        return
    raise exc


def _rmtree(target: str) -> None:
    if sys.version_info >= (3, 12):
        shutil.rmtree(target, onexc=_raise_unless_missing)
    else:
        shutil.rmtree(target, onerror=lambda fn, path, exc_info: _raise_unless_missing(fn, path, exc_info[1]))


class RmtreeDeletionStrategy(DeletionStrategy):
    name = "rmtree"

    def is_supported(self) -> bool:
        return True

    def remove(self, path: str | os.PathLike[str]) -> RemovalOutcome:
        target = os.fspath(path)
        try:
            st = os.lstat(target)
        except FileNotFoundError:
            return RemovalOutcome.NOT_FOUND

        if not stat.S_ISDIR(st.st_mode):
            try:
                os.unlink(target)
            except FileNotFoundError:
                pass
            return RemovalOutcome.REMOVED

        _rmtree(target)
        return RemovalOutcome.REMOVED


__all__ = ["RmtreeDeletionStrategy"]
