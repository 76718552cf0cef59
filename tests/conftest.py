"""Global pytest configuration and fixtures."""

from collections.abc import Generator
from logging import Logger
from pathlib import Path

import pytest

from litetable import (
    Database,
    Table,
    get_logger,
    number_column,
    setup_test_logging,
    text_column,
)
from litetable.database import SQLiteConnection


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture(scope="function")
def logger() -> Logger:
    """Provide a logger instance for tests."""
    return get_logger("test")


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path using pytest's tmp_path."""
    return tmp_path / "test.db"


@pytest.fixture
def connection() -> Generator[SQLiteConnection, None, None]:
    """Provide a connected in-memory SQLite connection."""
    with SQLiteConnection() as conn:
        yield conn


@pytest.fixture
def db() -> Generator[Database, None, None]:
    """Provide an empty in-memory database."""
    with Database() as database:
        yield database


@pytest.fixture
def cars(db: Database) -> Table:
    """Register a cars table holding two rows."""
    table = Table("cars", text_column("name"), number_column("price"))
    db.add_table(table)
    table.add_record({"name": "Porsche", "price": 100000})
    table.add_record({"name": "Audi", "price": 200000})
    return table
