"""In-process transactions over filesystem mutations.

Provides the TransactionManager state machine and the UndoAction/UndoLog
types it consumes during rollback.
"""

from txfileio.transaction.manager import TransactionManager
from txfileio.transaction.undo import UndoAction, UndoEntry, UndoLog

__all__ = [
    "TransactionManager",
    "UndoAction",
    "UndoEntry",
    "UndoLog",
]
