"""Background scan worker speaking a request/response message protocol.

Callers submit ``ExploreRequest`` / ``MeasureSizeRequest`` and read back
``MatchFound``, ``ExplorationComplete`` and ``SizeResult`` messages, either by
draining or by blocking on ``get_message``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue
from typing import Union

from ..walker import DEFAULT_CONCURRENCY_LIMIT
from .scan import DEFAULT_TARGET_NAME, explore, measure_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExploreRequest:
    root: Path


@dataclass(frozen=True)
class MeasureSizeRequest:
    root: Path
    request_id: int


@dataclass(frozen=True)
class MatchFound:
    path: Path


@dataclass(frozen=True)
class ExplorationComplete:
    root: Path


@dataclass(frozen=True)
class SizeResult:
    request_id: int
    total_bytes: int


WorkerRequest = Union[ExploreRequest, MeasureSizeRequest]
WorkerMessage = Union[MatchFound, ExplorationComplete, SizeResult]


class ScanWorker:
    """Runs each request on its own thread and funnels results into one queue."""

    def __init__(
        self,
        target_name: str = DEFAULT_TARGET_NAME,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    ) -> None:
        if not target_name:
            raise ValueError("target_name must be non-empty")
        self.target_name = target_name
        self.concurrency_limit = concurrency_limit
        self._lock = threading.Lock()
        self._next_request_id = 1
        self._messages: Queue[WorkerMessage] = Queue()

    def submit(self, request: WorkerRequest) -> None:
        if isinstance(request, ExploreRequest):
            self._start_explore(request)
        elif isinstance(request, MeasureSizeRequest):
            self._spawn(self._measure, request, name="dirsweep-size")
        else:
            raise TypeError(f"unsupported request: {request!r}")

    def request_explore(self, root: Path) -> None:
        self.submit(ExploreRequest(root=Path(root)))

    def request_size(self, root: Path) -> int:
        """Queue a size measurement for ``root`` and return its request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
        self.submit(MeasureSizeRequest(root=Path(root), request_id=request_id))
        return request_id

    def _spawn(self, target: Callable[[WorkerRequest], None], request: WorkerRequest, *, name: str) -> None:
        worker = threading.Thread(target=target, args=(request,), name=name, daemon=True)
        worker.start()

    def _start_explore(self, request: ExploreRequest) -> None:
        # The walker runs on its own pool, so no extra thread is needed here.
        explore(
            request.root,
            self.target_name,
            lambda path: self._messages.put(MatchFound(path=Path(path))),
            concurrency_limit=self.concurrency_limit,
            on_complete=lambda: self._messages.put(ExplorationComplete(root=request.root)),
        )

    def _measure(self, request: MeasureSizeRequest) -> None:
        try:
            total = measure_size(request.root, concurrency_limit=self.concurrency_limit)
        except OSError as exc:
            logger.warning("size measurement of %s failed: %s", request.root, exc)
            total = 0
        self._messages.put(SizeResult(request_id=request.request_id, total_bytes=total))

    def get_message(self, timeout: float | None = None) -> WorkerMessage | None:
        """Block for the next message; ``None`` on timeout."""
        try:
            return self._messages.get(timeout=timeout)
        except Empty:
            return None

    def drain_messages(self) -> list[WorkerMessage]:
        """Drain all messages produced so far."""
        out: list[WorkerMessage] = []
        while True:
            try:
                out.append(self._messages.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "ExplorationComplete",
    "ExploreRequest",
    "MatchFound",
    "MeasureSizeRequest",
    "ScanWorker",
    "SizeResult",
    "WorkerMessage",
    "WorkerRequest",
]
