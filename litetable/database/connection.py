"""SQLite database connection implementation."""

import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path
from types import TracebackType
from typing import Any

from litetable.exceptions import (
    DatabaseOpenError,
    SqlExecutionError,
    ValueConversionError,
)
from litetable.log import get_logger
from litetable.types import ParamType, SqlLogHook, TransactionMode

logger = get_logger(__name__)

MEMORY_DATABASE = ":memory:"

# Types whose no-argument constructor is the "zero" value for an absent scalar
_ZERO_VALUE_TYPES = (int, float, str, bool)


class ResultCursor:
    """Forward-only cursor over query results.

    ``has_rows`` peeks at most one row ahead; iteration yields that row first.
    """

    def __init__(
        self, cursor: sqlite3.Cursor, sql: str, parameters: dict[str, Any]
    ) -> None:
        self._cursor = cursor
        self._sql = sql
        self._parameters = parameters
        self._peeked: sqlite3.Row | None = None

    @property
    def has_rows(self) -> bool:
        """Whether at least one more row is available."""
        if self._peeked is None:
            self._peeked = self._fetch()
        return self._peeked is not None

    @property
    def column_names(self) -> list[str]:
        return [col[0] for col in self._cursor.description or ()]

    def _fetch(self) -> sqlite3.Row | None:
        try:
            return self._cursor.fetchone()  # type: ignore[no-any-return]
        except sqlite3.Error as e:
            logger.error(f"Fetch failed: {e}")
            raise SqlExecutionError(self._sql, self._parameters) from e

    def __iter__(self) -> Iterator[sqlite3.Row]:
        return self

    def __next__(self) -> sqlite3.Row:
        if self._peeked is not None:
            row, self._peeked = self._peeked, None
            return row
        row = self._fetch()
        if row is None:
            raise StopIteration
        return row

    def close(self) -> None:
        self._cursor.close()


class SQLiteConnection:
    """A single synchronous SQLite connection.

    The connection runs in autocommit mode: every statement stands alone
    unless it is issued between explicit ``begin_transaction`` and
    ``commit_transaction`` calls.
    """

    def __init__(
        self,
        db_path: str | Path = MEMORY_DATABASE,
        busy_timeout_ms: int = 60000,
        journal_mode: str = "DELETE",
        log_sql: SqlLogHook | None = None,
        echo: bool = False,
    ) -> None:
        """Initialize SQLite connection.

        Args:
            db_path: Path to SQLite database file, or ``:memory:``
            busy_timeout_ms: How long to wait on a locked database
            journal_mode: SQLite journal mode
            log_sql: Optional hook called with (sql, parameters) before
                every statement
            echo: Log statements at INFO instead of DEBUG
        """
        self.db_path = str(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self.journal_mode = journal_mode
        self.log_sql = log_sql
        self.echo = echo
        self._connection: sqlite3.Connection | None = None

    @property
    def is_memory(self) -> bool:
        return self.db_path == MEMORY_DATABASE

    def connect(self) -> None:
        """Establish SQLite database connection."""
        if self._connection is not None:
            return
        try:
            if not self.is_memory:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                self.db_path,
                isolation_level=None,
                check_same_thread=False,
                timeout=self.busy_timeout_ms / 1000,
            )
            self._connection.row_factory = sqlite3.Row
            self._configure_connection()
            logger.info(f"Connected to SQLite: {self.db_path}")
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to connect to SQLite database: {e}")
            self._connection = None
            raise DatabaseOpenError(self.db_path) from e

    def disconnect(self) -> None:
        """Close SQLite database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("Disconnected from SQLite")

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._connection is not None

    @property
    def in_transaction(self) -> bool:
        """Whether an explicit transaction is open."""
        return self._connection is not None and self._connection.in_transaction

    def _configure_connection(self) -> None:
        """Configure SQLite connection settings."""
        if not self._connection:
            return

        self._connection.execute(f"PRAGMA journal_mode = {self.journal_mode}")
        self._connection.execute("PRAGMA synchronous = NORMAL")
        self._connection.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")

    def _require_connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise RuntimeError("Database not connected")
        return self._connection

    def _trace(self, sql: str, parameters: dict[str, Any]) -> None:
        if self.log_sql is not None:
            self.log_sql(sql, parameters)
        logger.log(
            logging.INFO if self.echo else logging.DEBUG,
            f"SQL: {sql.strip()} {parameters or ''}".rstrip(),
        )

    def execute(self, sql: str, parameters: ParamType = None) -> None:
        """Execute a statement that returns no rows.

        Args:
            sql: SQL statement, using ``:name`` placeholders
            parameters: Named parameters

        Raises:
            SqlExecutionError: If SQLite rejects the statement
        """
        connection = self._require_connection()
        params = dict(parameters or {})
        self._trace(sql, params)

        try:
            connection.execute(sql, params)
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {e}")
            raise SqlExecutionError(sql, params) from e

    def query(self, sql: str, parameters: ParamType = None) -> ResultCursor:
        """Run a query and return a forward-only cursor over its rows.

        Raises:
            SqlExecutionError: If SQLite rejects the statement
        """
        connection = self._require_connection()
        params = dict(parameters or {})
        self._trace(sql, params)

        try:
            cursor = connection.execute(sql, params)
        except sqlite3.Error as e:
            logger.error(f"Query failed: {e}")
            raise SqlExecutionError(sql, params) from e
        return ResultCursor(cursor, sql, params)

    def get_value(
        self,
        sql: str,
        parameters: ParamType = None,
        as_type: type | None = None,
    ) -> Any:
        """Fetch the first column of the first row.

        Args:
            sql: SQL query
            parameters: Named parameters
            as_type: Type to convert the value to

        Returns:
            The converted value. A missing row or SQL null gives the type's
            zero value for int, float, str and bool, and None otherwise.
        """
        cursor = self.query(sql, parameters)
        try:
            row = next(cursor, None)
            column_names = cursor.column_names
        finally:
            cursor.close()

        value = row[0] if row is not None else None
        if value is None:
            return as_type() if as_type in _ZERO_VALUE_TYPES else None
        if as_type is None or isinstance(value, as_type):
            return value

        try:
            return as_type(value)
        except (ValueError, TypeError) as e:
            name = column_names[0] if column_names else sql
            raise ValueConversionError(name, value) from e

    def last_insert_rowid(self) -> int:
        """ROWID of the most recent successful INSERT on this connection."""
        rowid: int = self.get_value("SELECT last_insert_rowid()", as_type=int)
        return rowid

    def begin_transaction(
        self, mode: TransactionMode | str = TransactionMode.DEFERRED
    ) -> None:
        """Begin an explicit transaction.

        Raises:
            ValueError: If mode is not DEFERRED, IMMEDIATE or EXCLUSIVE
        """
        if not isinstance(mode, TransactionMode):
            mode = TransactionMode(mode.upper())
        self.execute(f"BEGIN {mode.value}")

    def commit_transaction(self) -> None:
        """Commit the open transaction."""
        self.execute("COMMIT")

    def rollback_transaction(self) -> None:
        """Roll back the open transaction."""
        self.execute("ROLLBACK")

    def savepoint(self, name: str) -> None:
        """Open a named savepoint, nested inside any open transaction."""
        self.execute(f"SAVEPOINT {name}")

    def release_savepoint(self, name: str) -> None:
        self.execute(f"RELEASE SAVEPOINT {name}")

    def rollback_to_savepoint(self, name: str) -> None:
        """Undo everything since the savepoint; the savepoint stays open."""
        self.execute(f"ROLLBACK TO SAVEPOINT {name}")

    def transaction(
        self, mode: TransactionMode | str = TransactionMode.DEFERRED
    ) -> "SQLiteTransaction":
        """Context manager that commits on success and rolls back on error."""
        return SQLiteTransaction(self, mode)

    def __enter__(self) -> "SQLiteConnection":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit."""
        self.disconnect()


class SQLiteTransaction:
    """SQLite database transaction."""

    def __init__(
        self, connection: SQLiteConnection, mode: TransactionMode | str
    ) -> None:
        self._connection = connection
        self._mode = mode

    def __enter__(self) -> "SQLiteTransaction":
        self._connection.begin_transaction(self._mode)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self._connection.commit_transaction()
        elif self._connection.in_transaction:
            self._connection.rollback_transaction()
