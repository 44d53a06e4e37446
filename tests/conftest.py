"""Pytest configuration and fixtures for txfileio tests."""

from pathlib import Path

import pytest
from pydantic import BaseModel

from txfileio.codec.settings import IOSettings
from txfileio.file_io import FileIO
from txfileio.transaction.manager import TransactionManager


class Car(BaseModel):
    """Sample record used by the codec and file tests."""

    model: str
    horse_power: int


class Brand(BaseModel):
    """Sample nested model."""

    name: str
    owner: str
    cars: list[Car]


@pytest.fixture
def brand() -> Brand:
    """Sample brand with two cars."""
    return Brand(
        name="Aston Martin",
        owner="Ford Motor Company",
        cars=[Car(model="DB2", horse_power=140), Car(model="DB6", horse_power=330)],
    )


@pytest.fixture
def manager() -> TransactionManager:
    """Fresh, idle transaction manager."""
    return TransactionManager()


@pytest.fixture
def file_io() -> FileIO:
    """FileIO with default settings, independent of the environment."""
    return FileIO(settings=IOSettings())


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """Small directory tree to copy.

    Layout:
        src/a.txt
        src/b.bin
        src/nested/c.txt
        src/nested/deeper/d.txt
    """
    root = tmp_path / "src"
    (root / "nested" / "deeper").mkdir(parents=True)
    (root / "a.txt").write_text("alpha")
    (root / "b.bin").write_bytes(bytes(range(256)) * 40)
    (root / "nested" / "c.txt").write_text("charlie")
    (root / "nested" / "deeper" / "d.txt").write_text("delta")
    return root
