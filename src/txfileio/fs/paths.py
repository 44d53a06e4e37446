"""Path utilities for filesystem operations.

This module provides path normalization, timestamp lookups, and the
missing-ancestor detection used when registering undo actions.
"""

import os
import unicodedata
from pathlib import Path


def normalize_path(path: str | Path, root: Path | None = None) -> Path:
    """Normalize a path for consistent handling.

    Args:
        path: Path to normalize
        root: Optional root directory for relative paths

    Returns:
        Normalized absolute path
    """
    if not isinstance(path, Path):
        path = Path(path)

    if not path.is_absolute() and root is not None:
        path = root / path
    path = path.resolve()

    # Normalize Unicode (NFC on macOS, NFD handling)
    if os.name == "posix":
        path = Path(unicodedata.normalize("NFC", str(path)))

    return path


def get_creation_time(path: Path) -> float | None:
    """Get the creation time of a path as epoch seconds.

    Uses st_birthtime where the platform reports it and falls back to
    st_ctime (inode change time on Linux, creation time on older Windows).

    Args:
        path: File or directory path

    Returns:
        Epoch seconds, or None if the path does not exist
    """
    try:
        stat = path.stat()
    except FileNotFoundError:
        return None
    birthtime = getattr(stat, "st_birthtime", None)
    if birthtime is not None:
        return float(birthtime)
    return stat.st_ctime


def get_modification_time(path: Path) -> float | None:
    """Get the last-write time of a path as epoch seconds, or None if missing."""
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return None


def find_missing_ancestor(path: Path) -> Path | None:
    """Find the outermost directory that would be created to reach ``path``.

    ``path`` itself is included, so for a file target pass its parent.

    Args:
        path: Directory path that is about to be created

    Returns:
        The highest missing directory on the way down to ``path``, or None
        when ``path`` already exists
    """
    missing: Path | None = None
    current = path
    while not current.exists():
        missing = current
        if current.parent == current:
            break
        current = current.parent
    return missing


def ensure_parent_dir(path: Path) -> None:
    """Ensure parent directory exists for a path.

    Args:
        path: Path whose parent directory should exist

    Raises:
        OSError: If parent directory cannot be created
    """
    parent = path.parent
    if not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)


def is_same_file(first: Path, second: Path) -> bool:
    """Check whether two paths point at the same existing file."""
    try:
        return os.path.samefile(first, second)
    except OSError:
        return False
