"""Table declarations and per-table record operations."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .columns import (
    EXPLICIT_ID_COLUMN_NAME,
    IMPLICIT_ID_COLUMN_NAME,
    Column,
    identity_column,
)
from .database.ddl import SQLiteSchemaBuilder
from .exceptions import (
    ColumnNotFoundError,
    SchemaDefinitionError,
    SchemaFrozenError,
    TableNotFoundError,
)
from .log import get_logger
from .records import RecordCodec, TypedResultSet
from .types import ParamType, Record

if TYPE_CHECKING:
    from .database.manager import Database

logger = get_logger(__name__)

LAST_ID_SQL = "SELECT seq FROM sqlite_sequence WHERE name = :name"


class Table:
    """A declared table: name, ordered columns and identity policy.

    Unless ``use_implicit_id`` is set, the table gets an explicit
    ``id INTEGER PRIMARY KEY AUTOINCREMENT`` column, always first. With
    ``use_implicit_id`` rows are addressed by SQLite's ROWID instead, which
    suits existing tables declared that way.

    Columns can only be added until the table is registered with a
    :class:`~litetable.database.manager.Database`.
    """

    def __init__(
        self, name: str, *columns: Column, use_implicit_id: bool = False
    ) -> None:
        if not name or not name.strip():
            raise SchemaDefinitionError("Table name must not be empty")

        self.name = name
        self._use_implicit_id = use_implicit_id
        self._columns: list[Column] = []
        self._schema_builder = SQLiteSchemaBuilder()
        # Set by Database.add_table; all record operations go through it
        self.database: "Database | None" = None

        for column in columns:
            self.add_column(column)

    def __repr__(self) -> str:
        names = ", ".join(column.name for column in self._columns)
        return f"Table({self.name!r}, columns=[{names}])"

    @property
    def use_implicit_id(self) -> bool:
        return self._use_implicit_id

    @use_implicit_id.setter
    def use_implicit_id(self, value: bool) -> None:
        self._check_not_frozen()
        if value and any(column.is_identity for column in self._columns):
            raise SchemaDefinitionError(
                f"Table {self.name} declares an identity column"
            )
        for column in self._columns:
            self._check_reserved_name(column, value)
        self._use_implicit_id = value

    @property
    def columns(self) -> tuple[Column, ...]:
        return tuple(self._columns)

    @property
    def user_columns(self) -> tuple[Column, ...]:
        """Columns other than the identity column, in declaration order."""
        return tuple(column for column in self._columns if not column.is_identity)

    @property
    def id_column_name(self) -> str:
        if self._use_implicit_id:
            return IMPLICIT_ID_COLUMN_NAME
        return EXPLICIT_ID_COLUMN_NAME

    @property
    def is_registered(self) -> bool:
        return self.database is not None

    @property
    def codec(self) -> RecordCodec:
        return RecordCodec(self)

    def _check_not_frozen(self) -> None:
        if self.database is not None:
            raise SchemaFrozenError(
                f"Table {self.name} is already registered with a database"
            )

    def add_column(self, column: Column) -> None:
        """Append a column; an identity column is placed first.

        Raises:
            SchemaFrozenError: If the table is already registered
            SchemaDefinitionError: If the column clashes with the table's
                columns or identity policy
        """
        self._check_not_frozen()

        if self.has_column(column.name):
            raise SchemaDefinitionError(
                f"Duplicate column {column.name} on table {self.name}"
            )
        if column.is_identity:
            if self._use_implicit_id:
                raise SchemaDefinitionError(
                    f"Table {self.name} uses the implicit ROWID; "
                    "it cannot declare an identity column"
                )
            self._columns.insert(0, column)
            return

        self._check_reserved_name(column, self._use_implicit_id)
        self._columns.append(column)

    def _check_reserved_name(self, column: Column, use_implicit_id: bool) -> None:
        if column.is_identity:
            return
        reserved = (
            IMPLICIT_ID_COLUMN_NAME if use_implicit_id else EXPLICIT_ID_COLUMN_NAME
        )
        if column.name.lower() == reserved.lower():
            raise SchemaDefinitionError(
                f"Column name {column.name} is reserved for the identity "
                f"of table {self.name}"
            )

    def ensure_identity_column(self) -> None:
        """Insert the explicit identity column at position 0 if it is missing."""
        if self._use_implicit_id:
            return
        if any(column.is_identity for column in self._columns):
            return
        self._columns.insert(0, identity_column())
        logger.debug(f"Added identity column {EXPLICIT_ID_COLUMN_NAME} to {self.name}")

    def find_column(self, name: str) -> Column | None:
        """Case-insensitive column lookup; None when absent."""
        lowered = name.lower()
        for column in self._columns:
            if column.name.lower() == lowered:
                return column
        return None

    def get_column(self, name: str) -> Column:
        """Case-insensitive column lookup.

        Raises:
            ColumnNotFoundError: If no such column is declared
        """
        column = self.find_column(name)
        if column is None:
            raise ColumnNotFoundError(name, self.name)
        return column

    def has_column(self, name: str) -> bool:
        return self.find_column(name) is not None

    def generate_create_ddl(self) -> str:
        return self._schema_builder.create_table_sql(
            self.name, self._columns, self._use_implicit_id
        )

    def generate_add_column_ddl(self, column: Column) -> str:
        return self._schema_builder.add_column_sql(self.name, column)

    def _require_database(self) -> "Database":
        if self.database is None:
            raise TableNotFoundError(
                self.name, f"Table {self.name} is not registered with a database"
            )
        return self.database

    def add_record(self, record: Mapping[str, Any]) -> int:
        """Insert a record and return its identity value.

        Args:
            record: Column name to native value; the identity is assigned by
                the database and must not be supplied

        Returns:
            The new row's identity

        Raises:
            ColumnNotFoundError: If a key is not a declared column
            ValueConversionError: If a value does not fit its column; nothing
                is written in that case
            SqlExecutionError: If SQLite rejects the row (e.g. a constraint)
        """
        database = self._require_database()
        database.execute(self.codec.build_insert(record))
        return database.connection.last_insert_rowid()

    def add_record_values(self, *values: Any) -> int:
        """Insert a record given one value per user column, in order."""
        user_columns = self.user_columns
        if len(values) != len(user_columns):
            raise ValueError(
                f'Column count mismatch. Table "{self.name}" requires '
                f"{len(user_columns)} column(s)."
            )
        record = {column.name: value for column, value in zip(user_columns, values)}
        return self.add_record(record)

    def update_record(self, record: Mapping[str, Any], record_id: int) -> None:
        """Update one row, addressed by its identity."""
        id_name = self.id_column_name
        self.update_records(record, f"{id_name} = :{id_name}", {id_name: record_id})

    def update_records(
        self,
        record: Mapping[str, Any],
        where: str,
        parameters: ParamType = None,
    ) -> None:
        """Update every row matching a WHERE clause.

        The WHERE clause is trusted SQL; pass values through ``parameters``
        with ``:name`` placeholders.
        """
        database = self._require_database()
        database.execute(self.codec.build_update(record, where), parameters)

    def update_value(self, column_name: str, value: Any, record_id: int) -> None:
        self.update_record({column_name: value}, record_id)

    def delete_record(self, record_id: int) -> None:
        database = self._require_database()
        id_name = self.id_column_name
        database.execute(
            f"DELETE FROM {self.name} WHERE {id_name} = :{id_name}",
            {id_name: record_id},
        )

    def select(
        self,
        where: str | None = None,
        sort: str | None = None,
        parameters: ParamType = None,
    ) -> TypedResultSet:
        """Query typed records.

        Every column is projected so each record is complete; implicit-id
        tables also project ROWID first.

        Args:
            where: Trusted WHERE clause; defaults to all rows
            sort: Trusted ORDER BY clause; defaults to the identity column
            parameters: Named parameters for the clauses

        Returns:
            A lazy, single-pass result set
        """
        database = self._require_database()
        projection = f"{IMPLICIT_ID_COLUMN_NAME}, *" if self._use_implicit_id else "*"
        sql = (
            f"SELECT {projection} FROM {self.name} "
            f"WHERE {where or '1'} ORDER BY {sort or self.id_column_name}"
        )
        return TypedResultSet(self, database.query(sql, parameters))

    def get_record(self, record_id: int) -> Record | None:
        """A single typed record by identity, or None."""
        id_name = self.id_column_name
        result = self.select(f"{id_name} = :{id_name}", parameters={id_name: record_id})
        return result.first()

    def record_count(self) -> int:
        database = self._require_database()
        count: int = database.get_value(
            f"SELECT COUNT(*) FROM {self.name}", as_type=int
        )
        return count

    def last_insert_id(self) -> int:
        """The most recently assigned identity for this table, 0 if none.

        Explicit-id tables read SQLite's per-table AUTOINCREMENT bookkeeping;
        implicit-id tables report their highest ROWID.
        """
        database = self._require_database()
        if self._use_implicit_id:
            max_rowid: int = database.get_value(
                f"SELECT max({IMPLICIT_ID_COLUMN_NAME}) FROM {self.name}", as_type=int
            )
            return max_rowid
        last_id: int = database.get_value(LAST_ID_SQL, {"name": self.name}, as_type=int)
        return last_id
