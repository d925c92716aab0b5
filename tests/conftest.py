"""Shared fixtures for the musicdb test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

import musicdb.config
from musicdb.core.database import MusicDatabase
from musicdb.core.kernel import available_kinds

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
def _reset_config() -> Iterator[None]:
    """Drop the cached config so every test starts from the packaged defaults."""
    musicdb.config._config = None
    yield
    musicdb.config._config = None


@pytest.fixture
def file1() -> Path:
    """Three songs."""
    return DATA_DIR / "file1.txt"


@pytest.fixture
def file2() -> Path:
    """Eight songs; its first three lines are file1."""
    return DATA_DIR / "file2.txt"


@pytest.fixture(params=available_kinds())
def kind(request: pytest.FixtureRequest) -> str:
    """Every registered storage kind."""
    return request.param


@pytest.fixture
def make_db(kind: str):
    """Factory for empty databases of the kind under test."""

    def _make(capacity: int | None = None) -> MusicDatabase:
        return MusicDatabase(capacity, kind=kind)

    return _make
