"""File reads, encoded writes, and copies with rollback registration.

Every mutating method resolves its target, rejects collisions when
overwriting is not allowed, registers an undo action with the transaction
manager, and only then touches the filesystem. When a target appears
between the collision check and the exclusive open, the registered undo
is withdrawn again. Async variants do their byte I/O through anyio and
their path checks in a worker thread.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import anyio
from anyio import to_thread

from txfileio.codec.conversions import Conversions
from txfileio.core.constants import DEFAULT_BUFFER_SIZE
from txfileio.core.errors import SourceMissingError, TargetExistsError
from txfileio.fs.paths import ensure_parent_dir, is_same_file, normalize_path
from txfileio.fs.rollback import register_rollback
from txfileio.transaction.manager import TransactionManager
from txfileio.transaction.undo import UndoAction
from txfileio.utils.debug import debug

Payload = str | bytes


class FileOperations:
    """Read, write, and copy single files.

    Attributes:
        conversions: Codec used by the format-specific helpers
        manager: Transaction manager undo actions are registered with
        chunk_size: Chunk size for async copies without an explicit buffer size
    """

    def __init__(
        self,
        conversions: Conversions,
        manager: TransactionManager,
        chunk_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        self.conversions = conversions
        self.manager = manager
        self.chunk_size = chunk_size

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_bytes(self, path: str | Path) -> bytes:
        return self._source(path).read_bytes()

    def read_text(self, path: str | Path) -> str:
        return self._source(path).read_text(encoding="utf-8")

    def read_json(self, path: str | Path, model: Any = None) -> Any:
        return self.conversions.from_json(self.read_text(path), model=model)

    def read_bson(self, path: str | Path, model: Any = None) -> Any:
        return self.conversions.from_bson(self.read_bytes(path), model=model)

    def read_xml(self, path: str | Path, model: Any = None) -> Any:
        return self.conversions.from_xml(self.read_text(path), model=model)

    def read_csv(self, path: str | Path, model: Any = None) -> list[Any]:
        return self.conversions.from_csv(self.read_text(path), model=model)

    async def read_bytes_async(self, path: str | Path) -> bytes:
        source = await to_thread.run_sync(self._source, path)
        return await anyio.Path(source).read_bytes()

    async def read_text_async(self, path: str | Path) -> str:
        source = await to_thread.run_sync(self._source, path)
        return await anyio.Path(source).read_text(encoding="utf-8")

    async def read_json_async(self, path: str | Path, model: Any = None) -> Any:
        return self.conversions.from_json(await self.read_text_async(path), model=model)

    async def read_bson_async(self, path: str | Path, model: Any = None) -> Any:
        return self.conversions.from_bson(
            await self.read_bytes_async(path), model=model
        )

    async def read_xml_async(self, path: str | Path, model: Any = None) -> Any:
        return self.conversions.from_xml(await self.read_text_async(path), model=model)

    async def read_csv_async(self, path: str | Path, model: Any = None) -> list[Any]:
        return self.conversions.from_csv(await self.read_text_async(path), model=model)

    # ------------------------------------------------------------------
    # Encoded writes
    # ------------------------------------------------------------------

    def write_encoded(
        self, path: str | Path, payload: Payload, overwrite: bool = False
    ) -> Path:
        """Write already-encoded content to a file.

        Args:
            path: Target file path; missing parent directories are created
            payload: Text (written as UTF-8) or bytes
            overwrite: Replace an existing file instead of failing

        Returns:
            The normalized target path

        Raises:
            TargetExistsError: If the target exists and overwrite is False
        """
        return self._write(path, payload, overwrite, label="write_encoded")

    def write_json(self, path: str | Path, item: Any, overwrite: bool = False) -> Path:
        return self._write(
            path, self.conversions.to_json(item), overwrite, label="write_json"
        )

    def write_bson(self, path: str | Path, item: Any, overwrite: bool = False) -> Path:
        return self._write(
            path, self.conversions.to_bson(item), overwrite, label="write_bson"
        )

    def write_xml(self, path: str | Path, item: Any, overwrite: bool = False) -> Path:
        return self._write(
            path, self.conversions.to_xml(item), overwrite, label="write_xml"
        )

    def write_csv(
        self, path: str | Path, items: Iterable[Any], overwrite: bool = False
    ) -> Path:
        return self._write(
            path, self.conversions.to_csv(items), overwrite, label="write_csv"
        )

    async def write_encoded_async(
        self, path: str | Path, payload: Payload, overwrite: bool = False
    ) -> Path:
        """Async counterpart of write_encoded()."""
        return await self._write_async(
            path, payload, overwrite, label="write_encoded_async"
        )

    async def write_json_async(
        self, path: str | Path, item: Any, overwrite: bool = False
    ) -> Path:
        return await self._write_async(
            path, self.conversions.to_json(item), overwrite, label="write_json_async"
        )

    async def write_bson_async(
        self, path: str | Path, item: Any, overwrite: bool = False
    ) -> Path:
        return await self._write_async(
            path, self.conversions.to_bson(item), overwrite, label="write_bson_async"
        )

    async def write_xml_async(
        self, path: str | Path, item: Any, overwrite: bool = False
    ) -> Path:
        return await self._write_async(
            path, self.conversions.to_xml(item), overwrite, label="write_xml_async"
        )

    async def write_csv_async(
        self, path: str | Path, items: Iterable[Any], overwrite: bool = False
    ) -> Path:
        return await self._write_async(
            path, self.conversions.to_csv(items), overwrite, label="write_csv_async"
        )

    def _write(
        self, path: str | Path, payload: Payload, overwrite: bool, label: str
    ) -> Path:
        target, action = self._prepare_target(path, overwrite, label)
        mode = _write_mode(payload, overwrite)
        try:
            with open(target, mode, **_encoding(payload)) as f:
                f.write(payload)
        except FileExistsError as e:
            self._withdraw(action)
            raise TargetExistsError(target) from e
        debug(f"{label}: wrote {target}")
        return target

    async def _write_async(
        self, path: str | Path, payload: Payload, overwrite: bool, label: str
    ) -> Path:
        target, action = await to_thread.run_sync(
            self._prepare_target, path, overwrite, label
        )
        try:
            async with await anyio.open_file(
                target, _write_mode(payload, overwrite), **_encoding(payload)
            ) as f:
                await f.write(payload)
        except FileExistsError as e:
            self._withdraw(action)
            raise TargetExistsError(target) from e
        debug(f"{label}: wrote {target}")
        return target

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def copy(
        self,
        source: str | Path,
        target: str | Path,
        overwrite: bool = False,
        buffer_size: int | None = None,
    ) -> Path:
        """Copy a file byte for byte.

        Copying a file onto itself is a no-op and registers nothing.

        Args:
            source: Existing source file
            target: Target file path; missing parent directories are created
            overwrite: Replace an existing target instead of failing
            buffer_size: Chunk size in bytes; defaults to the platform's
                copy buffer size

        Returns:
            The normalized target path

        Raises:
            SourceMissingError: If the source file does not exist
            TargetExistsError: If the target exists and overwrite is False
            ValueError: If buffer_size is not positive
        """
        src, dst = _resolve_pair(source, target, buffer_size)
        if is_same_file(src, dst):
            debug(f"copy: {src} is {dst}, nothing to do")
            return dst

        _, action = self._prepare_target(dst, overwrite, "copy")
        try:
            with open(src, "rb") as source_file, open(
                dst, "wb" if overwrite else "xb"
            ) as target_file:
                if buffer_size is None:
                    shutil.copyfileobj(source_file, target_file)
                else:
                    shutil.copyfileobj(source_file, target_file, buffer_size)
        except FileExistsError as e:
            self._withdraw(action)
            raise TargetExistsError(dst) from e

        debug(f"copy: {src} -> {dst}")
        return dst

    async def copy_async(
        self,
        source: str | Path,
        target: str | Path,
        overwrite: bool = False,
        buffer_size: int | None = None,
    ) -> Path:
        """Async counterpart of copy().

        Path resolution and directory creation run in a worker thread; the
        bytes are streamed through anyio in ``buffer_size`` chunks.
        """
        src, dst = await to_thread.run_sync(
            _resolve_pair, source, target, buffer_size
        )
        if await to_thread.run_sync(is_same_file, src, dst):
            debug(f"copy_async: {src} is {dst}, nothing to do")
            return dst

        _, action = await to_thread.run_sync(
            self._prepare_target, dst, overwrite, "copy_async"
        )
        chunk_size = buffer_size or self.chunk_size
        try:
            async with await anyio.open_file(src, "rb") as source_file:
                async with await anyio.open_file(
                    dst, "wb" if overwrite else "xb"
                ) as target_file:
                    while chunk := await source_file.read(chunk_size):
                        await target_file.write(chunk)
        except FileExistsError as e:
            self._withdraw(action)
            raise TargetExistsError(dst) from e

        debug(f"copy_async: {src} -> {dst}")
        return dst

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _prepare_target(
        self, path: str | Path, overwrite: bool, label: str
    ) -> tuple[Path, UndoAction | None]:
        """Check for collisions, register rollback, create parent directories."""
        target = normalize_path(path)
        if not overwrite and target.exists():
            raise TargetExistsError(target)

        action = register_rollback(self.manager, target, label=label)
        ensure_parent_dir(target)
        return target, action

    def _withdraw(self, action: UndoAction | None) -> None:
        # The target belongs to someone else; its undo must never run.
        if action is not None:
            self.manager.discard(action)

    @staticmethod
    def _source(path: str | Path) -> Path:
        source = normalize_path(path)
        if not source.is_file():
            raise SourceMissingError(source)
        return source


def _resolve_pair(
    source: str | Path, target: str | Path, buffer_size: int | None
) -> tuple[Path, Path]:
    if buffer_size is not None and buffer_size <= 0:
        raise ValueError(f"buffer_size must be positive, got {buffer_size}")

    src = normalize_path(source)
    if not src.is_file():
        raise SourceMissingError(src)
    return src, normalize_path(target)


def _write_mode(payload: Payload, overwrite: bool) -> str:
    mode = "w" if overwrite else "x"
    return mode + ("b" if isinstance(payload, bytes) else "")


def _encoding(payload: Payload) -> dict[str, str]:
    # Text is written verbatim; the codec already chose its line endings.
    return {} if isinstance(payload, bytes) else {"encoding": "utf-8", "newline": ""}
