from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from fintrack.database import DatabaseManager
from fintrack.managers import TransactionManager


@pytest.fixture()
def db_file(tmp_path: Path) -> str:
    path = str(tmp_path / "fintrack.db")
    asyncio.run(DatabaseManager(path).initialize_database())
    return path


@pytest.fixture()
def manager(db_file: str) -> TransactionManager:
    return TransactionManager(db_file)
