"""The Database: one SQLite connection plus its registered tables."""

from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any

from litetable.config import Settings
from litetable.exceptions import (
    DuplicateTableError,
    SchemaFrozenError,
    TableNotFoundError,
)
from litetable.log import get_logger
from litetable.records import TypedResultSet
from litetable.types import ParamType, SqlLogHook, TransactionMode

from .config import resolve_database_path
from .connection import (
    MEMORY_DATABASE,
    ResultCursor,
    SQLiteConnection,
    SQLiteTransaction,
)
from .reconciler import ReconciliationResult, ReconciliationStatus, SchemaReconciler

if TYPE_CHECKING:
    from litetable.table import Table

logger = get_logger(__name__)


class Database:
    """Typed access to a single SQLite database.

    Tables are declared in code and registered with :meth:`add_table`, which
    creates the backing table or adds any missing columns. Nothing is ever
    dropped: other code may keep its own tables and columns in the same file.

    A Database holds exactly one connection and does no locking; share it
    between threads only with external synchronization.
    """

    def __init__(
        self,
        path: str | Path = MEMORY_DATABASE,
        trust_backing_database: bool = False,
        log_sql: SqlLogHook | None = None,
        busy_timeout_ms: int = 60000,
        journal_mode: str = "DELETE",
        transaction_mode: TransactionMode = TransactionMode.DEFERRED,
        echo: bool = False,
    ) -> None:
        """Open (creating if needed) the database.

        Args:
            path: Database file path, or ``:memory:``
            trust_backing_database: Skip schema reconciliation when tables
                are registered. Only use it when the file is known to match.
            log_sql: Hook called with (sql, parameters) before every
                statement. It runs a lot; keep it cheap.
            busy_timeout_ms: SQLite busy timeout
            journal_mode: SQLite journal mode
            transaction_mode: Locking mode for reconciliation transactions
            echo: Log every statement at INFO

        Raises:
            DatabaseOpenError: If the file cannot be opened
        """
        self.connection = SQLiteConnection(
            path,
            busy_timeout_ms=busy_timeout_ms,
            journal_mode=journal_mode,
            log_sql=log_sql,
            echo=echo,
        )
        self.connection.connect()
        self.reconciler = SchemaReconciler(self.connection, transaction_mode)
        self._trust_backing_database = trust_backing_database
        self._tables: list["Table"] = []

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "Database":
        """Build a Database from configuration; kwargs override settings."""
        path = resolve_database_path(settings.environment, settings.database_path)
        options: dict[str, Any] = {
            "path": path,
            "trust_backing_database": settings.trust_backing_database,
            "busy_timeout_ms": settings.busy_timeout_ms,
            "journal_mode": settings.journal_mode,
            "transaction_mode": settings.transaction_mode,
            "echo": settings.log_sql,
        }
        options.update(kwargs)
        return cls(**options)

    @property
    def path(self) -> str:
        return self.connection.db_path

    @property
    def trust_backing_database(self) -> bool:
        return self._trust_backing_database

    @trust_backing_database.setter
    def trust_backing_database(self, value: bool) -> None:
        if value != self._trust_backing_database and self._tables:
            logger.warning(
                "trust_backing_database changed after tables were registered; "
                "it only applies to tables added from now on"
            )
        self._trust_backing_database = value

    @property
    def tables(self) -> tuple["Table", ...]:
        return tuple(self._tables)

    def add_table(self, table: "Table") -> ReconciliationResult:
        """Register a table, reconciling the backing schema unless trusted.

        Returns:
            What reconciliation did for this table

        Raises:
            SchemaFrozenError: If the table is already registered
            DuplicateTableError: If a table with the same name (ignoring
                case) is already registered
            SchemaReconciliationError: If the schema could not be brought up
                to date; the table is not registered in that case
        """
        if table.is_registered:
            raise SchemaFrozenError(
                f"Table {table.name} is already registered with a database"
            )
        if self.has_table(table.name):
            raise DuplicateTableError(f"Table already registered: {table.name}")

        table.ensure_identity_column()

        if self._trust_backing_database:
            result = ReconciliationResult(table.name, ReconciliationStatus.SKIPPED)
        else:
            result = self.reconciler.reconcile(table)

        table.database = self
        self._tables.append(table)
        logger.info(f"Registered table {table.name} ({result.status.value})")
        return result

    def find_table(self, name: str) -> "Table | None":
        """Case-insensitive table lookup; None when absent."""
        lowered = name.lower()
        for table in self._tables:
            if table.name.lower() == lowered:
                return table
        return None

    def get_table(self, name: str) -> "Table":
        """Case-insensitive table lookup.

        Raises:
            TableNotFoundError: If no such table is registered
        """
        table = self.find_table(name)
        if table is None:
            raise TableNotFoundError(name)
        return table

    def has_table(self, name: str) -> bool:
        return self.find_table(name) is not None

    def typed_query(
        self,
        table_name: str,
        where: str | None = None,
        sort: str | None = None,
        parameters: ParamType = None,
    ) -> TypedResultSet:
        """Query complete, typed records from a registered table."""
        return self.get_table(table_name).select(where, sort, parameters)

    def execute(self, sql: str, parameters: ParamType = None) -> None:
        self.connection.execute(sql, parameters)

    def query(self, sql: str, parameters: ParamType = None) -> ResultCursor:
        return self.connection.query(sql, parameters)

    def get_value(
        self, sql: str, parameters: ParamType = None, as_type: type | None = None
    ) -> Any:
        """First column of the first row, converted to ``as_type``."""
        return self.connection.get_value(sql, parameters, as_type)

    def begin_transaction(
        self, mode: TransactionMode | str = TransactionMode.DEFERRED
    ) -> None:
        self.connection.begin_transaction(mode)

    def commit_transaction(self) -> None:
        self.connection.commit_transaction()

    def rollback_transaction(self) -> None:
        self.connection.rollback_transaction()

    def transaction(
        self, mode: TransactionMode | str = TransactionMode.DEFERRED
    ) -> SQLiteTransaction:
        """Group statements atomically: ``with db.transaction(): ...``."""
        return self.connection.transaction(mode)

    def close(self) -> None:
        """Release the connection."""
        self.connection.disconnect()

    def __enter__(self) -> "Database":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
