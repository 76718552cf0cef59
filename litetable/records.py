"""Record marshalling between native values and SQL.

Writes render every value as an escaped literal through its column. Table
names, column names and WHERE clauses are not escaped; they are trusted SQL.
"""

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from .columns import IMPLICIT_ID_COLUMN_NAME
from .exceptions import ColumnNotFoundError
from .types import Record

if TYPE_CHECKING:
    import sqlite3

    from .database.connection import ResultCursor
    from .table import Table


class RecordCodec:
    """Builds literal INSERT and UPDATE statements for one table."""

    def __init__(self, table: "Table") -> None:
        self.table = table

    def encode(self, record: Mapping[str, Any]) -> list[tuple[str, str]]:
        """Pair each declared column name with its value's SQL literal.

        Raises:
            ColumnNotFoundError: If a key is not a declared column
            ValueConversionError: If a value does not fit its column
        """
        encoded: list[tuple[str, str]] = []
        for key, value in record.items():
            column = self.table.get_column(key)
            encoded.append((column.name, column.to_literal(value)))
        return encoded

    def build_insert(self, record: Mapping[str, Any]) -> str:
        """Build an INSERT statement; an empty record inserts default values."""
        for key in record:
            if self.table.get_column(key).is_identity:
                raise ValueError(f"Identity column {key} is assigned by the database")

        encoded = self.encode(record)

        if not encoded:
            return f"INSERT INTO {self.table.name} DEFAULT VALUES"

        names = ", ".join(name for name, _ in encoded)
        literals = ", ".join(literal for _, literal in encoded)
        return f"INSERT INTO {self.table.name} ({names}) VALUES ({literals})"

    def build_update(self, record: Mapping[str, Any], where: str) -> str:
        """Build an UPDATE statement restricted by a trusted WHERE clause."""
        encoded = self.encode(record)
        if not encoded:
            raise ValueError(f"No values given to update on {self.table.name}")

        assignments = ", ".join(f"{name} = {literal}" for name, literal in encoded)
        return f"UPDATE {self.table.name} SET {assignments} WHERE {where}"


class TypedResultSet:
    """Lazy, single-pass sequence of typed records read from a cursor."""

    def __init__(self, table: "Table", cursor: "ResultCursor") -> None:
        self.table = table
        self._cursor = cursor
        self._consumed = False

    def __iter__(self) -> Iterator[Record]:
        if self._consumed:
            raise RuntimeError("TypedResultSet can only be iterated once")
        self._consumed = True
        return self._records()

    def _records(self) -> Iterator[Record]:
        try:
            for row in self._cursor:
                yield self.materialize(row)
        finally:
            self._cursor.close()

    def materialize(self, row: "sqlite3.Row") -> Record:
        """Convert one raw row into a typed record.

        Raises:
            ColumnNotFoundError: If a declared column is missing from the row
            ValueConversionError: If a cell cannot be converted
        """
        record: Record = {}
        if self.table.use_implicit_id:
            record[IMPLICIT_ID_COLUMN_NAME] = int(row[0])

        available = {key.lower() for key in row.keys()}
        for column in self.table.columns:
            if column.name.lower() not in available:
                raise ColumnNotFoundError(column.name, self.table.name)
            record[column.name] = column.from_raw(row[column.name])
        return record

    def first(self) -> Record | None:
        """The first record, or None for an empty result."""
        return next(iter(self), None)

    def to_list(self) -> list[Record]:
        return list(self)
