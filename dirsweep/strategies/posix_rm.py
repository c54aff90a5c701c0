"""Deletion through the system ``rm -rf`` command."""

from __future__ import annotations

import os
import shutil
import subprocess

from .base import DeletionStrategy, RemovalOutcome


class PosixRmDeletionStrategy(DeletionStrategy):
    name = "rm"

    def is_supported(self) -> bool:
        return os.name == "posix" and shutil.which("rm") is not None

    def remove(self, path: str | os.PathLike[str]) -> RemovalOutcome:
        target = os.fspath(path)
        if not os.path.lexists(target):
            return RemovalOutcome.NOT_FOUND

        proc = subprocess.run(
            ["rm", "-rf", "--", target],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        if proc.returncode != 0:
            message = proc.stderr.strip() or f"rm failed with exit code {proc.returncode}"
            raise OSError(message)
        return RemovalOutcome.REMOVED


__all__ = ["PosixRmDeletionStrategy"]
