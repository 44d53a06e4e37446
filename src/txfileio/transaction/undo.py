"""Undo actions and the LIFO log that holds them.

An UndoAction is a frozen value carrying everything needed to reverse one
filesystem mutation. The UndoLog collects them in insertion order and
hands them back most-recent-first during rollback.
"""

from __future__ import annotations

import shutil
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, NamedTuple

from txfileio.fs.paths import get_creation_time, get_modification_time
from txfileio.utils.debug import debug

UndoOutcome = Literal["removed_dir", "removed_file", "skipped"]


@dataclass(frozen=True)
class UndoAction:
    """Deferred, parameterless undo of a single registered mutation.

    Attributes:
        target: File (or directory) created by the mutation
        threshold: Epoch seconds; only objects created or written at or after
            this instant are deleted
        created_dir: Outermost directory that did not exist when the action
            was registered, if any
        label: Caller label used in logs
    """

    target: Path
    threshold: float
    created_dir: Path | None = None
    label: str = ""

    def __call__(self) -> UndoOutcome:
        """Apply the rollback rule.

        Returns:
            What was removed, or "skipped" when nothing matched (including a
            target that no longer exists)

        Raises:
            OSError: If a matching path exists but cannot be removed
        """
        created_dir = self.created_dir
        if created_dir is not None and created_dir.is_dir():
            created_at = get_creation_time(created_dir)
            if created_at is not None and created_at >= self.threshold:
                shutil.rmtree(created_dir)
                debug(f"Undo {self.label}: removed directory {created_dir}")
                return "removed_dir"

        target = self.target
        if target.is_file():
            modified_at = get_modification_time(target)
            if modified_at is not None and modified_at >= self.threshold:
                try:
                    target.unlink()
                except FileNotFoundError:
                    return "skipped"
                debug(f"Undo {self.label}: removed file {target}")
                return "removed_file"

        return "skipped"


class UndoEntry(NamedTuple):
    """One logged undo callable and the transaction it was registered in."""

    label: str
    action: Callable[[], Any]
    transaction_id: str | None = None


class UndoLog:
    """Thread-safe last-in-first-out log of undo callables.

    Pushes take a private lock so concurrent registrations never block on
    the transaction manager's own lock.
    """

    def __init__(self) -> None:
        self._entries: list[UndoEntry] = []
        self._lock = threading.Lock()

    def push(
        self,
        action: Callable[[], Any],
        label: str = "",
        transaction_id: str | None = None,
    ) -> None:
        """Append an undo callable.

        Args:
            action: Zero-argument callable reversing one mutation
            label: Caller label used in logs
            transaction_id: Transaction the action belongs to
        """
        with self._lock:
            self._entries.append(UndoEntry(label, action, transaction_id))

    def pop(self) -> UndoEntry | None:
        """Remove and return the most recently pushed entry, or None if empty."""
        with self._lock:
            if not self._entries:
                return None
            return self._entries.pop()

    def remove(self, action: Callable[[], Any]) -> bool:
        """Drop the most recent entry holding exactly ``action``.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            for index in range(len(self._entries) - 1, -1, -1):
                if self._entries[index].action is action:
                    del self._entries[index]
                    return True
            return False

    def clear(self) -> int:
        """Discard every entry without running it.

        Returns:
            Number of entries discarded
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __bool__(self) -> bool:
        return len(self) > 0
