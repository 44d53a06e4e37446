"""Tests for UndoAction rollback rules and the UndoLog."""

import os
import time
from pathlib import Path

import pytest

from txfileio.transaction.undo import UndoAction, UndoLog


def _age(path: Path, seconds: float = 3600) -> None:
    """Push a file's access and modification times into the past."""
    past = time.time() - seconds
    os.utime(path, (past, past))


class TestUndoAction:
    """Timestamp heuristic applied at rollback time."""

    def test_removes_created_directory(self, tmp_path: Path) -> None:
        threshold = time.time() - 0.05
        created = tmp_path / "x"
        target = created / "y" / "z.json"
        target.parent.mkdir(parents=True)
        target.write_text("{}")

        action = UndoAction(target=target, threshold=threshold, created_dir=created)

        assert action() == "removed_dir"
        assert not created.exists()
        assert tmp_path.exists()

    def test_removes_new_file_in_existing_directory(self, tmp_path: Path) -> None:
        threshold = time.time() - 0.05
        target = tmp_path / "new.txt"
        target.write_text("new")

        assert UndoAction(target=target, threshold=threshold)() == "removed_file"
        assert not target.exists()
        assert tmp_path.exists()

    def test_keeps_file_older_than_threshold(self, tmp_path: Path) -> None:
        target = tmp_path / "old.txt"
        target.write_text("old")
        _age(target)

        action = UndoAction(target=target, threshold=time.time() - 0.05)

        assert action() == "skipped"
        assert target.read_text() == "old"

    def test_missing_target_is_skipped(self, tmp_path: Path) -> None:
        action = UndoAction(
            target=tmp_path / "gone" / "file.txt",
            threshold=time.time(),
            created_dir=tmp_path / "gone",
        )

        assert action() == "skipped"

    def test_falls_back_to_file_when_directory_is_old(self, tmp_path: Path) -> None:
        """A created_dir older than the threshold is left alone."""
        directory = tmp_path / "dir"
        directory.mkdir()
        target = directory / "file.txt"
        threshold = time.time() + 3600
        target.write_text("data")
        os.utime(target, (threshold + 1, threshold + 1))

        action = UndoAction(target=target, threshold=threshold, created_dir=directory)

        assert action() == "removed_file"
        assert directory.exists()
        assert not target.exists()

    def test_is_frozen(self, tmp_path: Path) -> None:
        action = UndoAction(target=tmp_path, threshold=0.0)

        with pytest.raises(AttributeError):
            action.threshold = 1.0  # type: ignore[misc]


class TestUndoLog:
    """LIFO behaviour of the undo log."""

    def test_pop_returns_most_recent_first(self) -> None:
        log = UndoLog()
        log.push(lambda: None, "a")
        log.push(lambda: None, "b")

        first = log.pop()
        second = log.pop()

        assert first is not None and first[0] == "b"
        assert second is not None and second[0] == "a"
        assert log.pop() is None

    def test_clear_reports_count(self) -> None:
        log = UndoLog()
        for _ in range(3):
            log.push(lambda: None)

        assert log.clear() == 3
        assert len(log) == 0
        assert not log

    def test_remove_matches_by_identity(self) -> None:
        log = UndoLog()

        def first() -> None:
            pass

        def second() -> None:
            pass

        log.push(first, "first")
        log.push(second, "second")

        assert log.remove(first) is True
        assert log.remove(first) is False
        entry = log.pop()
        assert entry is not None and entry.action is second
        assert log.pop() is None

    def test_entries_carry_transaction_id(self) -> None:
        log = UndoLog()
        log.push(lambda: None, "a", "tx-1")

        entry = log.pop()

        assert entry is not None
        assert (entry.label, entry.transaction_id) == ("a", "tx-1")
