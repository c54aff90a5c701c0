"""Recursive removal for platforms that cannot drop non-empty directories.

Each path is first removed directly. A directory that refuses because it
still has children is emptied by removing every child concurrently, then
removed again. Missing paths count as already removed, and the first fatal
error in a subtree becomes that subtree's result.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor

from .base import (
    DeletionStrategy,
    FilesystemOps,
    RemovalOutcome,
    is_a_directory,
    is_not_empty,
    is_not_found,
)

logger = logging.getLogger(__name__)

DEFAULT_REMOVE_WORKERS = 32

Done = Callable[[Exception | None], None]


class _OneShot:
    """Forward the first call to ``done`` and drop the rest."""

    def __init__(self, done: Done) -> None:
        self._done = done
        self._lock = threading.Lock()
        self._fired = False

    def __call__(self, error: Exception | None) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired = True
        self._done(error)


class _ChildFanIn:
    """Counts finished children and reports once with the first error."""

    def __init__(self, remaining: int, on_finished: Done) -> None:
        self._lock = threading.Lock()
        self._remaining = remaining
        self._first_error: Exception | None = None
        self._fired = False
        self._on_finished = on_finished

    def child_done(self, error: Exception | None) -> None:
        with self._lock:
            if error is not None and self._first_error is None:
                self._first_error = error
            self._remaining -= 1
            if self._remaining > 0 or self._fired:
                return
            self._fired = True
            first_error = self._first_error
        self._on_finished(first_error)


class _RemovalRun:
    """Continuation-style removal steps for one ``remove`` call.

    No step blocks on another, so a bounded executor cannot deadlock however
    deep the tree is.
    """

    def __init__(self, fs: FilesystemOps, executor: Executor) -> None:
        self.fs = fs
        self.executor = executor

    def remove(self, path: str, done: Done) -> None:
        try:
            st = self.fs.lstat(path)
        except OSError as exc:
            return done(None if is_not_found(exc) else exc)

        if stat.S_ISDIR(st.st_mode):
            return self.remove_directory(path, done)

        try:
            self.fs.unlink(path)
        except OSError as exc:
            if is_not_found(exc):
                return done(None)
            if is_a_directory(exc):
                return self.remove_directory(path, done)
            return done(exc)
        done(None)

    def remove_directory(self, path: str, done: Done) -> None:
        try:
            self.fs.rmdir(path)
        except OSError as exc:
            if is_not_empty(exc):
                return self.remove_children(path, done)
            return done(None if is_not_found(exc) else exc)
        done(None)

    def remove_children(self, path: str, done: Done) -> None:
        try:
            names = self.fs.listdir(path)
        except OSError as exc:
            return done(None if is_not_found(exc) else exc)

        if not names:
            return self._remove_emptied(path, done)

        def on_children_finished(error: Exception | None) -> None:
            if error is not None:
                return done(error)
            # Runs on the last child's thread, whose own guard already fired.
            try:
                self._remove_emptied(path, done)
            except Exception as exc:
                done(exc)

        fan_in = _ChildFanIn(len(names), on_children_finished)
        for name in names:
            child = os.path.join(path, name)
            self.executor.submit(self._guarded, child, _OneShot(fan_in.child_done))

    def _remove_emptied(self, path: str, done: Done) -> None:
        try:
            self.fs.rmdir(path)
        except OSError as exc:
            return done(None if is_not_found(exc) else exc)
        done(None)

    def _guarded(self, path: str, done: Done) -> None:
        try:
            self.remove(path, done)
        except Exception as exc:
            done(exc)


class FallbackDeletionStrategy(DeletionStrategy):
    """Empty-then-remove strategy with concurrent child fan-out."""

    name = "fallback"

    def __init__(self, max_workers: int = DEFAULT_REMOVE_WORKERS, fs: FilesystemOps | None = None) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.max_workers = max_workers
        self.fs = fs if fs is not None else FilesystemOps()

    def is_supported(self) -> bool:
        return True

    def remove(self, path: str | os.PathLike[str]) -> RemovalOutcome:
        target = os.fspath(path)
        try:
            self.fs.lstat(target)
        except OSError as exc:
            if is_not_found(exc):
                return RemovalOutcome.NOT_FOUND
            raise

        finished = threading.Event()
        results: list[Exception | None] = []

        def done(error: Exception | None) -> None:
            results.append(error)
            finished.set()

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="dirsweep-remove") as executor:
            _RemovalRun(self.fs, executor).remove(target, _OneShot(done))
            finished.wait()

        error = results[0]
        if error is not None:
            logger.debug("removal of %s failed: %s", target, error)
            raise error
        return RemovalOutcome.REMOVED


__all__ = [
    "DEFAULT_REMOVE_WORKERS",
    "FallbackDeletionStrategy",
]
