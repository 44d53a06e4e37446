"""End-to-end transaction scenarios through the FileIO façade."""

import os
import time
from pathlib import Path

import pytest

from txfileio.codec.settings import IOSettings
from txfileio.core.errors import (
    NoActiveTransactionError,
    TargetExistsError,
    TransactionAlreadyActiveError,
)
from txfileio.file_io import FileIO


class TestCommit:
    """Mutations inside begin...commit stand."""

    def test_writes_survive_commit(self, file_io: FileIO, tmp_path: Path, brand) -> None:
        paths = [tmp_path / "a.json", tmp_path / "x" / "b.bson", tmp_path / "c.xml"]

        file_io.begin_transaction()
        file_io.file.write_json(paths[0], brand)
        file_io.file.write_bson(paths[1], brand)
        file_io.file.write_xml(paths[2], brand)
        file_io.commit()

        assert all(path.exists() for path in paths)
        assert file_io.transactions.pending == 0
        assert file_io.in_transaction is False

    def test_copy_then_commit(self, file_io: FileIO, tmp_path: Path) -> None:
        source = tmp_path / "src.txt"
        source.write_bytes(b"payload " * 100)
        target = tmp_path / "dst.txt"

        file_io.begin_transaction()
        file_io.file.copy(source, target)
        file_io.commit()

        assert target.read_bytes() == source.read_bytes()
        assert file_io.transactions.pending == 0


class TestRollback:
    """Mutations inside begin...rollback are undone."""

    def test_write_into_new_directory(self, file_io: FileIO, tmp_path: Path) -> None:
        file_io.begin_transaction()
        file_io.file.write_json(tmp_path / "x" / "y.json", {"k": "v"})
        assert (tmp_path / "x" / "y.json").exists()
        file_io.rollback()

        assert not (tmp_path / "x" / "y.json").exists()
        assert not (tmp_path / "x").exists()
        assert tmp_path.exists()

    def test_write_into_existing_directory_keeps_it(
        self, file_io: FileIO, tmp_path: Path
    ) -> None:
        existing = tmp_path / "existing"
        existing.mkdir()
        (existing / "old.txt").write_text("old")

        file_io.begin_transaction()
        file_io.file.write_json(existing / "new.json", [1, 2, 3])
        file_io.rollback()

        assert not (existing / "new.json").exists()
        assert (existing / "old.txt").read_text() == "old"

    def test_all_formats_rolled_back(
        self, file_io: FileIO, tmp_path: Path, brand
    ) -> None:
        file_io.begin_transaction()
        written = [
            file_io.file.write_json(tmp_path / "b.json", brand),
            file_io.file.write_bson(tmp_path / "b.bson", brand),
            file_io.file.write_xml(tmp_path / "b.xml", brand),
            file_io.file.write_csv(tmp_path / "b.csv", brand.cars),
        ]
        file_io.rollback()

        assert not any(path.exists() for path in written)

    def test_rollback_order_most_recent_first(
        self, file_io: FileIO, tmp_path: Path, source_tree: Path
    ) -> None:
        """A, then B, then directory D with C: all are gone after rollback."""
        a = tmp_path / "A.json"
        b = tmp_path / "B.json"
        d = tmp_path / "D"

        file_io.begin_transaction()
        file_io.file.write_json(a, {"n": 1})
        file_io.file.write_json(b, {"n": 2})
        file_io.directory.copy_tree(source_tree, d)
        assert (d / "nested" / "c.txt").exists()
        file_io.rollback()

        assert not a.exists()
        assert not b.exists()
        assert not d.exists()
        assert source_tree.exists()

    def test_copy_tree_into_existing_target(
        self, file_io: FileIO, tmp_path: Path, source_tree: Path
    ) -> None:
        target = tmp_path / "target"
        target.mkdir()
        (target / "keep.txt").write_text("keep")

        file_io.begin_transaction()
        file_io.directory.copy_tree(source_tree, target)
        file_io.rollback()

        assert sorted(p.name for p in target.iterdir()) == ["keep.txt"]

    def test_failed_write_then_rollback(self, file_io: FileIO, tmp_path: Path) -> None:
        """Catch-and-rollback after an operation fails mid-transaction."""
        existing = tmp_path / "existing.json"
        existing.write_text("original")
        created = tmp_path / "out" / "first.json"

        file_io.begin_transaction()
        try:
            file_io.file.write_json(created, {"n": 1})
            file_io.file.write_json(existing, {"n": 2})
        except TargetExistsError:
            file_io.rollback()

        assert not (tmp_path / "out").exists()
        assert existing.read_text() == "original"
        assert file_io.in_transaction is False

    def test_overwrite_is_deleted_on_rollback(
        self, file_io: FileIO, tmp_path: Path
    ) -> None:
        """Original content of an overwritten file is not restored."""
        path = tmp_path / "data.json"
        path.write_text("original")
        past = time.time() - 3600
        os.utime(path, (past, past))

        file_io.begin_transaction()
        file_io.file.write_json(path, {"new": True}, overwrite=True)
        file_io.rollback()

        assert not path.exists()

    def test_out_of_band_delete_does_not_break_rollback(
        self, file_io: FileIO, tmp_path: Path
    ) -> None:
        first = tmp_path / "first.json"
        second = tmp_path / "second.json"

        file_io.begin_transaction()
        file_io.file.write_json(first, {})
        file_io.file.write_json(second, {})
        second.unlink()
        file_io.rollback()

        assert not first.exists()
        assert file_io.in_transaction is False

    def test_self_copy_survives_rollback(self, file_io: FileIO, tmp_path: Path) -> None:
        path = tmp_path / "same.txt"
        path.write_text("content")

        file_io.begin_transaction()
        file_io.file.copy(path, path)
        file_io.rollback()

        assert path.read_text() == "content"

    @pytest.mark.asyncio
    async def test_async_operations_rolled_back(
        self, file_io: FileIO, tmp_path: Path, source_tree: Path, brand
    ) -> None:
        file_io.begin_transaction()
        await file_io.file.write_json_async(tmp_path / "n" / "brand.json", brand)
        await file_io.file.copy_async(source_tree / "a.txt", tmp_path / "a.txt")
        await file_io.directory.copy_tree_async(source_tree, tmp_path / "tree")
        file_io.rollback()

        assert sorted(p.name for p in tmp_path.iterdir()) == ["src"]


class TestProtocol:
    """Façade-level protocol misuse and helpers."""

    def test_begin_twice(self, file_io: FileIO) -> None:
        file_io.begin_transaction()

        with pytest.raises(TransactionAlreadyActiveError):
            file_io.begin_transaction()

        assert file_io.in_transaction is True

    def test_commit_and_rollback_without_begin(self, file_io: FileIO) -> None:
        with pytest.raises(NoActiveTransactionError):
            file_io.commit()
        with pytest.raises(NoActiveTransactionError):
            file_io.rollback()

    def test_writes_outside_transaction_are_not_tracked(
        self, file_io: FileIO, tmp_path: Path
    ) -> None:
        file_io.file.write_json(tmp_path / "free.json", {})

        assert file_io.transactions.pending == 0

    def test_context_manager_rolls_back(self, file_io: FileIO, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError):
            with file_io.transaction() as io:
                io.file.write_json(tmp_path / "t" / "a.json", {})
                raise RuntimeError("abort")

        assert not (tmp_path / "t").exists()

    def test_context_manager_commits(self, file_io: FileIO, tmp_path: Path) -> None:
        with file_io.transaction() as io:
            io.file.write_json(tmp_path / "a.json", {})

        assert (tmp_path / "a.json").exists()
        assert file_io.in_transaction is False

    @pytest.mark.asyncio
    async def test_async_context_manager(self, file_io: FileIO, tmp_path: Path) -> None:
        with pytest.raises(TargetExistsError):
            async with file_io.atransaction() as io:
                await io.file.write_json_async(tmp_path / "a.json", {})
                await io.file.write_json_async(tmp_path / "a.json", {})

        assert not (tmp_path / "a.json").exists()

    def test_instances_do_not_share_transactions(self, tmp_path: Path) -> None:
        first = FileIO(settings=IOSettings())
        second = FileIO(settings=IOSettings())

        first.begin_transaction()
        second.file.write_json(tmp_path / "second.json", {})
        first.file.write_json(tmp_path / "first.json", {})
        first.rollback()

        assert (tmp_path / "second.json").exists()
        assert not (tmp_path / "first.json").exists()

    def test_tolerance_from_settings(self) -> None:
        io = FileIO(settings=IOSettings(rollback_tolerance_ms=500))

        assert io.transactions.tolerance == pytest.approx(0.5)
