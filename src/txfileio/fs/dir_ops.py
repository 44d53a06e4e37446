"""Recursive directory copies with rollback registration.

copy_tree() walks the source one level at a time, registering an undo
action for each created directory and delegating each file to
FileOperations.copy(). copy_tree_async() fans the children of every level
out concurrently and only reports a failure once every sibling finished.
Its directory listing and creation run in a worker thread.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from anyio import to_thread

from txfileio.core.errors import SourceMissingError
from txfileio.fs.file_ops import FileOperations
from txfileio.fs.paths import normalize_path
from txfileio.fs.rollback import register_rollback
from txfileio.transaction.manager import TransactionManager
from txfileio.utils.debug import debug


class DirectoryOperations:
    """Enumerate and copy directories."""

    def __init__(self, files: FileOperations) -> None:
        self.files = files

    @property
    def manager(self) -> TransactionManager:
        return self.files.manager

    def children(self, path: str | Path) -> tuple[list[Path], list[Path]]:
        """List the direct children of a directory.

        Args:
            path: Directory to enumerate

        Returns:
            (files, directories), each sorted by name

        Raises:
            SourceMissingError: If ``path`` is not an existing directory
        """
        directory = normalize_path(path)
        if not directory.is_dir():
            raise SourceMissingError(directory, kind="directory")

        files: list[Path] = []
        directories: list[Path] = []
        for entry in sorted(directory.iterdir()):
            if entry.is_dir():
                directories.append(entry)
            elif entry.is_file():
                files.append(entry)
        return files, directories

    def copy_tree(
        self,
        source: str | Path,
        target: str | Path,
        overwrite: bool = False,
        buffer_size: int | None = None,
    ) -> Path:
        """Copy a directory with all files and subdirectories.

        Args:
            source: Existing source directory
            target: Target directory; created if missing
            overwrite: Replace existing target files instead of failing
            buffer_size: Chunk size passed to each file copy

        Returns:
            The normalized target directory

        Raises:
            SourceMissingError: If the source directory does not exist
            TargetExistsError: If a target file exists and overwrite is False
        """
        dst, files, directories = self._prepare_tree(source, target, "copy_tree")

        for file_path in files:
            self.files.copy(file_path, dst / file_path.name, overwrite, buffer_size)

        for directory in directories:
            self.copy_tree(directory, dst / directory.name, overwrite, buffer_size)

        return dst

    async def copy_tree_async(
        self,
        source: str | Path,
        target: str | Path,
        overwrite: bool = False,
        buffer_size: int | None = None,
    ) -> Path:
        """Copy a directory, processing the children of each level concurrently.

        All sibling branches run to completion even if one of them fails;
        the first failure (in child order) is raised afterwards.
        """
        dst, files, directories = await to_thread.run_sync(
            self._prepare_tree, source, target, "copy_tree_async"
        )

        results = await asyncio.gather(
            *(
                self.files.copy_async(
                    file_path, dst / file_path.name, overwrite, buffer_size
                )
                for file_path in files
            ),
            *(
                self.copy_tree_async(
                    directory, dst / directory.name, overwrite, buffer_size
                )
                for directory in directories
            ),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        return dst

    def _create_directory(self, directory: Path, label: str) -> None:
        register_rollback(self.manager, directory, label=label, is_dir=True)
        directory.mkdir(parents=True, exist_ok=True)
        debug(f"{label}: ensured directory {directory}")

    def _prepare_tree(
        self, source: str | Path, target: str | Path, label: str
    ) -> tuple[Path, list[Path], list[Path]]:
        """Enumerate the source and create the target directory."""
        dst = normalize_path(target)
        files, directories = self.children(source)
        self._create_directory(dst, label)
        return dst, files, directories
