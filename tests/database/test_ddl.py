"""Unit tests for SQLite DDL generation."""

import pytest

from litetable import SchemaDefinitionError, identity_column, number_column, text_column
from litetable.database import SQLiteSchemaBuilder


@pytest.fixture
def builder() -> SQLiteSchemaBuilder:
    return SQLiteSchemaBuilder()


def test_create_table(builder: SQLiteSchemaBuilder) -> None:
    """Test CREATE TABLE with the explicit identity column."""
    sql = builder.create_table_sql(
        "people", [text_column("name", "NOT NULL"), number_column("age")], False
    )
    assert sql == (
        "CREATE TABLE people (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "name TEXT NOT NULL, age INT)"
    )


def test_create_table_identity_emitted_once(builder: SQLiteSchemaBuilder) -> None:
    """Test that a declared identity column is not repeated."""
    sql = builder.create_table_sql(
        "people", [identity_column(), text_column("name")], False
    )
    assert sql.count("PRIMARY KEY") == 1
    assert sql.startswith("CREATE TABLE people (id INTEGER")


def test_create_table_implicit_id(builder: SQLiteSchemaBuilder) -> None:
    """Test CREATE TABLE relying on the implicit ROWID."""
    sql = builder.create_table_sql("people", [text_column("name")], True)
    assert sql == "CREATE TABLE people (name TEXT)"


def test_create_table_without_columns(builder: SQLiteSchemaBuilder) -> None:
    """Test that a table needs at least one column."""
    with pytest.raises(SchemaDefinitionError):
        builder.create_table_sql("people", [], True)


def test_add_column(builder: SQLiteSchemaBuilder) -> None:
    """Test ALTER TABLE ADD COLUMN."""
    assert builder.add_column_sql("people", number_column("age")) == (
        "ALTER TABLE people ADD COLUMN age INT"
    )
    assert builder.add_column_sql("people", text_column("nick", "DEFAULT 'x'")) == (
        "ALTER TABLE people ADD COLUMN nick TEXT DEFAULT 'x'"
    )
