"""Scan orchestration built on the walker: search, size, background worker, config."""

from __future__ import annotations

from .scan import DEFAULT_TARGET_NAME, explore, find_matches, measure_size
from .scan_worker import (
    ExplorationComplete,
    ExploreRequest,
    MatchFound,
    MeasureSizeRequest,
    ScanWorker,
    SizeResult,
)

__all__ = [
    "DEFAULT_TARGET_NAME",
    "ExplorationComplete",
    "ExploreRequest",
    "MatchFound",
    "MeasureSizeRequest",
    "ScanWorker",
    "SizeResult",
    "explore",
    "find_matches",
    "measure_size",
]
