"""Bounded-concurrency breadth-first directory walker.

Directories are listed on a thread pool, at most ``concurrency_limit`` at a
time. Every entry read is handed to ``on_entry`` handlers, which may enqueue
more directories while other listings are still running. ``on_complete``
handlers fire exactly once, when the queue is empty and no listing is active.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from .fs import Entry, iter_directory_entries

logger = logging.getLogger(__name__)

# More concurrent listings speed up the search but raise peak memory and
# open file descriptors.
DEFAULT_CONCURRENCY_LIMIT = 100

EntryHandler = Callable[[Entry], None]
CompleteHandler = Callable[[], None]
DirectoryErrorHandler = Callable[[str, Exception], None]
ListEntries = Callable[[str], Iterable[Entry]]


@dataclass(frozen=True)
class WalkTask:
    """One pending directory listing."""

    path: str


class FileWalker:
    """Single-use walker; state is discarded once traversal completes."""

    def __init__(
        self,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        list_entries: ListEntries = iter_directory_entries,
    ) -> None:
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be >= 1")
        self.concurrency_limit = concurrency_limit
        self._list_entries = list_entries
        self._lock = threading.Lock()
        self._queue: deque[WalkTask] = deque()
        self._active = 0
        self._completed = False
        self._done = threading.Event()
        self._entry_handlers: list[EntryHandler] = []
        self._complete_handlers: list[CompleteHandler] = []
        self._error_handlers: list[DirectoryErrorHandler] = []
        self._executor = ThreadPoolExecutor(
            max_workers=concurrency_limit,
            thread_name_prefix="dirsweep-walker",
        )

    # registration
    def on_entry(self, fn: EntryHandler) -> None:
        self._entry_handlers.append(fn)

    def on_complete(self, fn: CompleteHandler) -> None:
        self._complete_handlers.append(fn)

    def on_directory_error(self, fn: DirectoryErrorHandler) -> None:
        """Register a handler for directories that could not be fully listed.

        Fires for open and read failures (``OSError``) and for listings cut
        short because an ``on_entry`` handler raised.
        """
        self._error_handlers.append(fn)

    # state
    @property
    def completed(self) -> bool:
        return self._done.is_set()

    @property
    def active_count(self) -> int:
        with self._lock:
            return self._active

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._queue)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until completion handlers have run; ``False`` on timeout."""
        return self._done.wait(timeout)

    # control
    def enqueue(self, path: str | os.PathLike[str]) -> None:
        """Queue ``path`` for listing and start it if a slot is free."""
        self.enqueue_all([path])

    def enqueue_all(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        """Queue several roots at once so none can finish before the rest are queued."""
        tasks = [WalkTask(path=os.fspath(path)) for path in paths]
        with self._lock:
            if self._completed:
                raise RuntimeError("walker already completed; create a new FileWalker")
            self._queue.extend(tasks)
            admitted = self._admit_locked()
            fire = self._completion_due_locked()
        self._start(admitted)
        if fire:
            self._fire_complete()

    def _admit_locked(self) -> list[WalkTask]:
        admitted: list[WalkTask] = []
        while self._queue and self._active < self.concurrency_limit:
            admitted.append(self._queue.popleft())
            self._active += 1
        return admitted

    def _completion_due_locked(self) -> bool:
        if self._completed or self._queue or self._active:
            return False
        self._completed = True
        return True

    def _start(self, tasks: list[WalkTask]) -> None:
        for task in tasks:
            self._executor.submit(self._run, task)

    def _run(self, task: WalkTask) -> None:
        try:
            self._list(task.path)
        finally:
            with self._lock:
                self._active -= 1
                admitted = self._admit_locked()
                fire = self._completion_due_locked()
            self._start(admitted)
            if fire:
                self._fire_complete()

    def _list(self, path: str) -> None:
        entries: Iterable[Entry] = ()
        try:
            entries = self._list_entries(path)
            for entry in entries:
                if not self._emit_entry(path, entry):
                    return
        except OSError as exc:
            # Open and mid-read failures both end this listing only.
            logger.debug("skipping unreadable directory %s: %s", path, exc)
            self._emit_directory_error(path, exc)
        finally:
            close = getattr(entries, "close", None)
            if close is not None:
                close()

    def _emit_entry(self, path: str, entry: Entry) -> bool:
        try:
            for fn in self._entry_handlers:
                fn(entry)
        except Exception as exc:
            logger.exception("entry handler failed while listing %s", path)
            self._emit_directory_error(path, exc)
            return False
        return True

    def _emit_directory_error(self, path: str, exc: Exception) -> None:
        for fn in self._error_handlers:
            try:
                fn(path, exc)
            except Exception:
                logger.exception("directory-error handler failed for %s", path)

    def _fire_complete(self) -> None:
        for fn in self._complete_handlers:
            try:
                fn()
            except Exception:
                logger.exception("completion handler failed")
        self._done.set()
        self._executor.shutdown(wait=False)


__all__ = [
    "DEFAULT_CONCURRENCY_LIMIT",
    "FileWalker",
    "WalkTask",
]
