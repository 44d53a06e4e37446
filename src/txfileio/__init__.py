"""Serialized file access with best-effort, in-process transactions."""

from txfileio.codec import Conversions, CsvSettings, IOSettings, JsonSettings, XmlSettings
from txfileio.core.errors import (
    CodecError,
    NoActiveTransactionError,
    RollbackError,
    SourceMissingError,
    TargetExistsError,
    TransactionAlreadyActiveError,
    TxFileIOError,
)
from txfileio.file_io import FileIO
from txfileio.fs.dir_ops import DirectoryOperations
from txfileio.fs.file_ops import FileOperations
from txfileio.transaction import TransactionManager, UndoAction, UndoLog

__all__ = [
    "CodecError",
    "Conversions",
    "CsvSettings",
    "DirectoryOperations",
    "FileIO",
    "FileOperations",
    "IOSettings",
    "JsonSettings",
    "NoActiveTransactionError",
    "RollbackError",
    "SourceMissingError",
    "TargetExistsError",
    "TransactionAlreadyActiveError",
    "TransactionManager",
    "TxFileIOError",
    "UndoAction",
    "UndoLog",
    "XmlSettings",
]
