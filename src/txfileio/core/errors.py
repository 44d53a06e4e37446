"""Custom exceptions for txfileio.

This module defines typed exceptions raised by the transaction manager,
the file and directory operations, and the format codec.
"""

from pathlib import Path
from typing import Any


class TxFileIOError(Exception):
    """Base exception for all txfileio errors.

    All custom exceptions inherit from this base class to allow
    broad exception handling when needed.
    """

    pass


class TransactionAlreadyActiveError(TxFileIOError):
    """Raised when begin() is called on a manager that is already running."""

    def __init__(self) -> None:
        super().__init__("Transaction has already been begun")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {"error": "transaction_already_active"}


class NoActiveTransactionError(TxFileIOError):
    """Raised when commit() or rollback() is called on an idle manager.

    Attributes:
        operation: The operation that was attempted ('commit' or 'rollback')
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: transaction has to be begun first")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {"error": "no_active_transaction", "operation": self.operation}

    def __repr__(self) -> str:
        return f"NoActiveTransactionError(operation={self.operation!r})"


class TargetExistsError(TxFileIOError):
    """Raised when a non-overwrite write or copy would replace an existing path.

    Attributes:
        path: The target path that already exists
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Target already exists: {self.path}")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {"error": "target_exists", "path": str(self.path)}

    def __repr__(self) -> str:
        return f"TargetExistsError(path={str(self.path)!r})"


class SourceMissingError(TxFileIOError):
    """Raised when a copy, read, or enumeration source does not exist.

    Attributes:
        path: The missing source path
        kind: Expected kind of the source ('file' or 'directory')
    """

    def __init__(self, path: Path, kind: str = "file") -> None:
        self.path = Path(path)
        self.kind = kind
        super().__init__(f"Source {kind} does not exist: {self.path}")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {"error": "source_missing", "path": str(self.path), "kind": self.kind}

    def __repr__(self) -> str:
        return f"SourceMissingError(path={str(self.path)!r}, kind={self.kind!r})"


class RollbackError(TxFileIOError):
    """Raised after a rollback in which one or more undo actions failed.

    The manager has already returned to idle when this is raised; every
    remaining undo action was still attempted.

    Attributes:
        failures: (label, exception) pairs in the order they were undone
    """

    def __init__(self, failures: list[tuple[str, BaseException]]) -> None:
        self.failures = failures

        message = f"Rollback finished with {len(failures)} failed undo action(s)"
        if failures:
            label, exc = failures[0]
            message += f" (first: {label}: {exc})"

        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging.

        Returns:
            Dictionary with the failed labels and their messages
        """
        return {
            "error": "rollback_failed",
            "failures": [
                {"label": label, "reason": str(exc)} for label, exc in self.failures
            ],
        }

    def __repr__(self) -> str:
        return f"RollbackError(failures={len(self.failures)})"


class CodecError(TxFileIOError):
    """Raised when an object cannot be encoded to, or decoded from, a format.

    Attributes:
        format: The format involved ('json', 'bson', 'xml', 'csv')
        reason: Human-readable reason for the failure
    """

    def __init__(self, format: str, reason: str) -> None:
        self.format = format
        self.reason = reason
        super().__init__(f"{format.upper()} conversion failed: {reason}")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {"error": "codec_error", "format": self.format, "reason": self.reason}

    def __repr__(self) -> str:
        return f"CodecError(format={self.format!r}, reason={self.reason!r})"
