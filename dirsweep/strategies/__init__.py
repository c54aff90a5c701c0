"""Deletion strategies and per-platform selection.

Every strategy implements ``remove(path) -> RemovalOutcome`` and
``is_supported()``. ``select_deletion_strategy`` picks one for the running
platform; ``strategy_by_name`` forces a specific one.
"""

from __future__ import annotations

import sys

from .base import (
    DeletionStrategy,
    FilesystemOps,
    RemovalOutcome,
    is_a_directory,
    is_not_empty,
    is_not_found,
)
from .fallback import DEFAULT_REMOVE_WORKERS, FallbackDeletionStrategy
from .posix_rm import PosixRmDeletionStrategy
from .rmtree import RmtreeDeletionStrategy

STRATEGY_TYPES: dict[str, type[DeletionStrategy]] = {
    FallbackDeletionStrategy.name: FallbackDeletionStrategy,
    RmtreeDeletionStrategy.name: RmtreeDeletionStrategy,
    PosixRmDeletionStrategy.name: PosixRmDeletionStrategy,
}


def available_strategy_names() -> list[str]:
    return sorted(STRATEGY_TYPES)


def strategy_by_name(name: str) -> DeletionStrategy:
    """Instantiate the strategy registered under ``name``."""
    try:
        strategy_type = STRATEGY_TYPES[name]
    except KeyError:
        raise ValueError(f"unknown deletion strategy: {name!r}") from None
    return strategy_type()


def select_deletion_strategy(platform: str | None = None) -> DeletionStrategy:
    """Return the preferred supported strategy for ``platform``.

    Windows cannot remove non-empty directories in one call and races
    removal against open handles, so it always gets the fallback strategy.
    """
    platform = sys.platform if platform is None else platform
    if platform == "win32":
        return FallbackDeletionStrategy()
    for candidate in (PosixRmDeletionStrategy(), RmtreeDeletionStrategy()):
        if candidate.is_supported():
            return candidate
    return FallbackDeletionStrategy()


__all__ = [
    "DEFAULT_REMOVE_WORKERS",
    "DeletionStrategy",
    "FallbackDeletionStrategy",
    "FilesystemOps",
    "PosixRmDeletionStrategy",
    "RemovalOutcome",
    "RmtreeDeletionStrategy",
    "STRATEGY_TYPES",
    "available_strategy_names",
    "is_a_directory",
    "is_not_empty",
    "is_not_found",
    "select_deletion_strategy",
    "strategy_by_name",
]
