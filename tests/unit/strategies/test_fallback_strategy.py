"""Tests for the empty-then-remove fallback deletion strategy.

Real temporary trees cover the happy path; ``FilesystemOps`` stubs inject
locked files, vanished children, and misclassified paths.
"""

from __future__ import annotations

import os
import stat
import tempfile
import threading
import time
import unittest
from pathlib import Path

from dirsweep.strategies import FallbackDeletionStrategy, FilesystemOps, RemovalOutcome


def _build_tree(root: Path) -> list[Path]:
    files = []
    for top in ("a", "b"):
        for sub in ("x", "y"):
            directory = root / "node_modules" / top / sub
            directory.mkdir(parents=True)
            for idx in range(3):
                leaf = directory / f"f{idx}.js"
                leaf.write_text("x" * idx, encoding="utf-8")
                files.append(leaf)
    return files


class FallbackDeletionStrategyTests(unittest.TestCase):
    def test_removes_every_file_and_intermediate_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            files = _build_tree(root)
            (root / "node_modules" / "empty").mkdir()
            self.assertEqual(len(files), 12)

            outcome = FallbackDeletionStrategy(max_workers=4).remove(root / "node_modules")

            self.assertIs(outcome, RemovalOutcome.REMOVED)
            self.assertFalse((root / "node_modules").exists())
            self.assertEqual(list(root.iterdir()), [])

    def test_missing_path_is_success_every_time(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "gone"
            strategy = FallbackDeletionStrategy()

            self.assertIs(strategy.remove(target), RemovalOutcome.NOT_FOUND)
            self.assertIs(strategy.remove(target), RemovalOutcome.NOT_FOUND)

    def test_second_remove_of_same_tree_reports_success(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)
            strategy = FallbackDeletionStrategy()

            self.assertIs(strategy.remove(root / "node_modules"), RemovalOutcome.REMOVED)
            self.assertIs(strategy.remove(root / "node_modules"), RemovalOutcome.NOT_FOUND)

    def test_removes_single_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "package-lock.json"
            target.write_text("{}", encoding="utf-8")

            self.assertIs(FallbackDeletionStrategy().remove(target), RemovalOutcome.REMOVED)
            self.assertFalse(target.exists())

    def test_locked_descendant_fails_whole_subtree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)
            locked = root / "node_modules" / "a" / "x" / "f1.js"

            def unlink(path: str) -> None:
                if Path(path) == locked:
                    raise PermissionError(13, "The process cannot access the file", path)
                os.unlink(path)

            strategy = FallbackDeletionStrategy(max_workers=4, fs=FilesystemOps(unlink=unlink))

            with self.assertRaises(PermissionError):
                strategy.remove(root / "node_modules")

            self.assertTrue(locked.exists())
            self.assertTrue((root / "node_modules").exists())
            # Siblings of the failing branch were still cleaned up.
            self.assertFalse((root / "node_modules" / "b").exists())

    def test_first_fatal_error_wins(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)

            def unlink(path: str) -> None:
                if path.endswith("f2.js"):
                    raise PermissionError(13, "locked", path)
                os.unlink(path)

            strategy = FallbackDeletionStrategy(max_workers=4, fs=FilesystemOps(unlink=unlink))

            with self.assertRaises(PermissionError) as ctx:
                strategy.remove(root / "node_modules")
            self.assertTrue(str(ctx.exception.filename).endswith("f2.js"))

    def test_children_are_removed_concurrently_before_parent(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "node_modules"
            target.mkdir()
            for idx in range(8):
                (target / f"f{idx}").write_text("x", encoding="utf-8")

            lock = threading.Lock()
            events: list[str] = []
            in_flight = 0
            max_in_flight = 0

            def unlink(path: str) -> None:
                nonlocal in_flight, max_in_flight
                with lock:
                    in_flight += 1
                    max_in_flight = max(max_in_flight, in_flight)
                time.sleep(0.02)
                os.unlink(path)
                with lock:
                    in_flight -= 1
                    events.append("unlink")

            def rmdir(path: str) -> None:
                os.rmdir(path)
                with lock:
                    events.append("rmdir")

            strategy = FallbackDeletionStrategy(max_workers=4, fs=FilesystemOps(unlink=unlink, rmdir=rmdir))

            self.assertIs(strategy.remove(target), RemovalOutcome.REMOVED)
            self.assertGreater(max_in_flight, 1)
            self.assertEqual(events, ["unlink"] * 8 + ["rmdir"])

    def test_children_vanishing_concurrently_count_as_removed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "node_modules"
            target.mkdir()
            (target / "real.js").write_text("x", encoding="utf-8")

            def listdir(path: str) -> list[str]:
                return os.listdir(path) + ["ghost.js"]

            strategy = FallbackDeletionStrategy(fs=FilesystemOps(listdir=listdir))

            self.assertIs(strategy.remove(target), RemovalOutcome.REMOVED)
            self.assertFalse(target.exists())

    def test_directory_misclassified_as_file_falls_back_to_directory_removal(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "node_modules"
            (target / "pkg").mkdir(parents=True)
            (target / "pkg" / "index.js").write_text("x", encoding="utf-8")
            file_stat = os.stat_result((stat.S_IFREG | 0o644, 0, 0, 1, 0, 0, 0, 0, 0, 0))

            def lstat(path: str) -> os.stat_result:
                if Path(path) == target:
                    return file_stat
                return os.lstat(path)

            def unlink(path: str) -> None:
                if os.path.isdir(path):
                    raise IsADirectoryError(21, "Is a directory", path)
                os.unlink(path)

            strategy = FallbackDeletionStrategy(fs=FilesystemOps(lstat=lstat, unlink=unlink))

            self.assertIs(strategy.remove(target), RemovalOutcome.REMOVED)
            self.assertFalse(target.exists())

    def test_unexpected_error_after_children_removed_is_raised(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            pkg = root / "node_modules" / "pkg"
            pkg.mkdir(parents=True)
            (pkg / "index.js").write_text("x", encoding="utf-8")
            lock = threading.Lock()
            pkg_rmdir_calls = 0

            def rmdir(path: str) -> None:
                nonlocal pkg_rmdir_calls
                if Path(path) == pkg:
                    with lock:
                        pkg_rmdir_calls += 1
                        call = pkg_rmdir_calls
                    if call == 2:
                        raise ValueError("handle table corrupted")
                os.rmdir(path)

            strategy = FallbackDeletionStrategy(max_workers=2, fs=FilesystemOps(rmdir=rmdir))
            errors: list[BaseException] = []

            def run_remove() -> None:
                try:
                    strategy.remove(root / "node_modules")
                except Exception as exc:
                    errors.append(exc)

            worker = threading.Thread(target=run_remove, daemon=True)
            worker.start()
            worker.join(timeout=5.0)

            self.assertFalse(worker.is_alive())
            self.assertEqual(len(errors), 1)
            self.assertIsInstance(errors[0], ValueError)
            self.assertTrue(pkg.exists())

    def test_max_workers_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            FallbackDeletionStrategy(max_workers=0)


if __name__ == "__main__":
    unittest.main()
