"""Transaction manager grouping filesystem mutations for undo on failure.

A TransactionManager is a small state machine (idle/running) that owns an
UndoLog. Mutating operations register undo actions while it is running;
commit() discards them and rollback() runs them most-recent-first.

This is a best-effort, in-process facility. It is not durable and does not
isolate concurrent writers.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any

import structlog

from txfileio.core.constants import DEFAULT_ROLLBACK_TOLERANCE_MS
from txfileio.core.errors import (
    NoActiveTransactionError,
    RollbackError,
    TransactionAlreadyActiveError,
)
from txfileio.transaction.undo import UndoLog


class TransactionManager:
    """Owns the undo log and the running flag of one transaction.

    Instances are independent: two managers never share state. begin(),
    commit() and rollback() are serialized by a single lock, while
    register_undo() only touches the log's own lock.
    """

    def __init__(
        self,
        tolerance_ms: float = DEFAULT_ROLLBACK_TOLERANCE_MS,
        logger: Any = None,
    ) -> None:
        """Initialize an idle manager.

        Args:
            tolerance_ms: Milliseconds subtracted from "now" when undo
                actions are built
            logger: Optional structlog logger instance
        """
        if tolerance_ms < 0:
            raise ValueError("tolerance_ms must be non-negative")

        self._lock = threading.Lock()
        self._log = UndoLog()
        self._running = False
        self._transaction_id: str | None = None
        self._base_logger = logger or structlog.get_logger(__name__)
        self._logger = self._base_logger
        self.tolerance = tolerance_ms / 1000.0

    @property
    def running(self) -> bool:
        """Whether a transaction is currently active."""
        return self._running

    @property
    def pending(self) -> int:
        """Number of undo actions waiting in the log."""
        return len(self._log)

    @property
    def transaction_id(self) -> str | None:
        """Identifier of the active transaction, None when idle."""
        return self._transaction_id

    def begin(self) -> None:
        """Begin a transaction.

        Anything left in the log by a registration that raced the previous
        commit or rollback is discarded.

        Raises:
            TransactionAlreadyActiveError: If a transaction is already running
        """
        with self._lock:
            if self._running:
                raise TransactionAlreadyActiveError()

            stale = self._log.clear()
            self._transaction_id = uuid.uuid4().hex
            self._logger = self._base_logger.bind(
                transaction_id=self._transaction_id
            )
            self._running = True

        if stale:
            self._logger.warning("transaction.stale_discarded", count=stale)
        self._logger.info("transaction.begin")

    def commit(self) -> None:
        """Accept every mutation since begin() and discard the undo log.

        Raises:
            NoActiveTransactionError: If no transaction is running
        """
        with self._lock:
            if not self._running:
                raise NoActiveTransactionError("commit")

            discarded = self._log.clear()
            logger = self._end()

        logger.info("transaction.commit", discarded=discarded)

    def rollback(self) -> None:
        """Undo every registered mutation, most recent first.

        Every undo action is attempted. Failures other than a missing target
        are collected and reported once the log is empty and the manager is
        idle again. Entries registered under another transaction are dropped
        without running.

        Raises:
            NoActiveTransactionError: If no transaction is running
            RollbackError: If one or more undo actions failed
        """
        failures: list[tuple[str, BaseException]] = []
        undone = 0
        skipped = 0

        with self._lock:
            if not self._running:
                raise NoActiveTransactionError("rollback")

            logger = self._logger
            while (entry := self._log.pop()) is not None:
                if entry.transaction_id != self._transaction_id:
                    logger.warning("transaction.undo_stale", label=entry.label)
                    continue

                try:
                    outcome = entry.action()
                except FileNotFoundError:
                    outcome = "skipped"
                except Exception as exc:
                    logger.warning(
                        "transaction.undo_failed", label=entry.label, reason=str(exc)
                    )
                    failures.append((entry.label, exc))
                    continue

                if outcome == "skipped":
                    skipped += 1
                else:
                    undone += 1
                logger.debug("transaction.undo", label=entry.label, outcome=outcome)

            self._end()

        logger.info(
            "transaction.rollback",
            undone=undone,
            skipped=skipped,
            failed=len(failures),
        )

        if failures:
            raise RollbackError(failures)

    def register_undo(self, action: Callable[[], Any], caller_label: str = "") -> None:
        """Queue an undo action if a transaction is running.

        Never raises and never waits on begin/commit/rollback. The action is
        stamped with the current transaction id, so a registration that loses
        a race with commit() or rollback() is never run by a later rollback.

        Args:
            action: Zero-argument callable reversing one mutation
            caller_label: Name of the registering operation, for logs
        """
        transaction_id = self._transaction_id
        if transaction_id is None:
            return

        self._log.push(action, caller_label, transaction_id)
        self._logger.debug("transaction.register", label=caller_label)

    def discard(self, action: Callable[[], Any]) -> bool:
        """Withdraw a registered action whose mutation never happened.

        Args:
            action: The exact callable passed to register_undo()

        Returns:
            True if the action was still in the log
        """
        removed = self._log.remove(action)
        if removed:
            self._logger.debug(
                "transaction.discard", label=getattr(action, "label", "")
            )
        return removed

    @contextmanager
    def transaction(self) -> Iterator[TransactionManager]:
        """Run a block inside a transaction.

        Commits on normal exit. On exception, rolls back and re-raises the
        original exception.

        Example:
            >>> with manager.transaction():
            ...     files.write_json("out/a.json", data)
        """
        self.begin()
        try:
            yield self
        except BaseException:
            self._rollback_after_error()
            raise
        self.commit()

    @asynccontextmanager
    async def atransaction(self) -> AsyncIterator[TransactionManager]:
        """Async counterpart of transaction()."""
        self.begin()
        try:
            yield self
        except BaseException:
            self._rollback_after_error()
            raise
        self.commit()

    def _rollback_after_error(self) -> None:
        # The caller's exception takes precedence over undo failures.
        if not self._running:
            return
        try:
            self.rollback()
        except RollbackError as exc:
            self._logger.error("transaction.rollback_incomplete", **exc.to_dict())

    def _end(self) -> Any:
        """Return to idle. Caller holds the lock."""
        logger = self._logger
        self._running = False
        self._transaction_id = None
        self._logger = self._base_logger
        return logger
