"""Rollback registration for mutating filesystem operations.

Every operation that creates or rewrites something on disk calls
register_rollback() with its final target before the first mutation.
The resulting UndoAction records which directories are about to be
created and the instant after which written objects count as ours.
"""

from __future__ import annotations

import time
from pathlib import Path

from txfileio.fs.paths import find_missing_ancestor
from txfileio.transaction.manager import TransactionManager
from txfileio.transaction.undo import UndoAction


def register_rollback(
    manager: TransactionManager,
    target: Path,
    *,
    label: str,
    is_dir: bool = False,
) -> UndoAction | None:
    """Register an undo action for a mutation that is about to happen.

    Args:
        manager: Transaction manager to register with
        target: File (or directory, with ``is_dir``) the mutation creates
        label: Caller label for logs
        is_dir: True when ``target`` is a directory being created

    Returns:
        The registered action, or None when no transaction is running
    """
    if not manager.running:
        return None

    threshold = time.time() - manager.tolerance
    created_dir = find_missing_ancestor(target if is_dir else target.parent)

    action = UndoAction(
        target=target,
        threshold=threshold,
        created_dir=created_dir,
        label=label,
    )
    manager.register_undo(action, label)
    return action
