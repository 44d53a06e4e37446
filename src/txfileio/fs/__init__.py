"""Filesystem operations with rollback registration.

File writes and copies, recursive directory copies, and the protocol they
follow to register undo actions with a TransactionManager.
"""
