"""FileIO façade tying together codec, file and directory operations.

Each FileIO owns its own TransactionManager and settings. Transactions are
not global: two FileIO instances never see each other's undo actions.

Example:
    io = FileIO()
    try:
        io.begin_transaction()
        io.file.write_json("out/brand.json", brand)
        io.directory.copy_tree("assets", "out/assets")
        io.commit()
    except Exception:
        io.rollback()
        raise
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any

import structlog

from txfileio.codec.conversions import Conversions
from txfileio.codec.settings import IOSettings
from txfileio.fs.dir_ops import DirectoryOperations
from txfileio.fs.file_ops import FileOperations
from txfileio.transaction.manager import TransactionManager


class FileIO:
    """Entry point for transactional file and directory access.

    Attributes:
        settings: Settings this instance was built with
        conversions: Format codec
        transactions: Transaction manager owned by this instance
        file: Single-file operations
        directory: Directory operations
    """

    def __init__(self, settings: IOSettings | None = None, logger: Any = None) -> None:
        """Initialize the façade.

        Args:
            settings: Optional settings; defaults to IOSettings.from_env()
            logger: Optional structlog logger instance
        """
        self.settings = settings or IOSettings.from_env()
        self._logger = logger or structlog.get_logger(__name__)

        self.conversions = Conversions(
            json_settings=self.settings.json_settings,
            csv_settings=self.settings.csv_settings,
            xml_settings=self.settings.xml_settings,
        )
        self.transactions = TransactionManager(
            tolerance_ms=self.settings.rollback_tolerance_ms,
            logger=self._logger,
        )
        self.file = FileOperations(
            self.conversions,
            self.transactions,
            chunk_size=self.settings.buffer_size,
        )
        self.directory = DirectoryOperations(self.file)

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is currently active."""
        return self.transactions.running

    def begin_transaction(self) -> None:
        """Begin an IO transaction."""
        self.transactions.begin()

    def commit(self) -> None:
        """Commit all changes made since begin_transaction()."""
        self.transactions.commit()

    def rollback(self) -> None:
        """Undo all changes made since begin_transaction()."""
        self.transactions.rollback()

    @contextmanager
    def transaction(self) -> Iterator[FileIO]:
        """Commit on success, roll back and re-raise on exception."""
        with self.transactions.transaction():
            yield self

    @asynccontextmanager
    async def atransaction(self) -> AsyncIterator[FileIO]:
        """Async counterpart of transaction()."""
        async with self.transactions.atransaction():
            yield self
