"""Additive schema reconciliation.

Brings the live SQLite schema up to date with a declared table by creating
the table or adding missing columns. Nothing is ever dropped or altered in
place: several independently declared sets of tables may share one database
file, each unaware of the others' tables and columns.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from litetable.exceptions import SchemaReconciliationError, SqlExecutionError
from litetable.log import get_logger
from litetable.types import TransactionMode

from .connection import SQLiteConnection

if TYPE_CHECKING:
    from litetable.table import Table

logger = get_logger(__name__)

TABLE_PROBE_SQL = (
    "SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name"
)
# SQLite column names are case-insensitive
COLUMN_PROBE_SQL = (
    "SELECT name FROM pragma_table_info(:table) WHERE name = :name COLLATE NOCASE"
)
RECONCILE_SAVEPOINT = "litetable_reconcile"


class ReconciliationStatus(str, Enum):
    """Outcome of reconciling one table."""

    CREATED = "created"
    ALTERED = "altered"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass
class ReconciliationResult:
    """Result of a schema reconciliation operation."""

    table: str
    status: ReconciliationStatus
    statements: list[str] = field(default_factory=list)
    execution_time_ms: float = 0.0

    @property
    def changed(self) -> bool:
        return bool(self.statements)


class SchemaReconciler:
    """Plans and applies the DDL needed for a declared table to exist."""

    def __init__(
        self,
        connection: SQLiteConnection,
        transaction_mode: TransactionMode = TransactionMode.DEFERRED,
    ) -> None:
        self.connection = connection
        self.transaction_mode = transaction_mode

    def table_exists(self, table_name: str) -> bool:
        """Exact, case-sensitive match against sqlite_master."""
        return self._probe(table_name, TABLE_PROBE_SQL, {"name": table_name})

    def column_exists(self, table_name: str, column_name: str) -> bool:
        return self._probe(
            table_name, COLUMN_PROBE_SQL, {"table": table_name, "name": column_name}
        )

    def _probe(self, table_name: str, sql: str, parameters: dict[str, str]) -> bool:
        try:
            cursor = self.connection.query(sql, parameters)
            try:
                return cursor.has_rows
            finally:
                cursor.close()
        except SqlExecutionError as e:
            raise SchemaReconciliationError(table_name, sql) from e

    def plan(self, table: "Table") -> list[str]:
        """Work out the DDL statements needed for ``table``, in declaration order.

        Returns:
            A single CREATE TABLE if the table is missing, otherwise one
            ALTER TABLE ADD COLUMN per missing column (possibly none)
        """
        if not self.table_exists(table.name):
            return [table.generate_create_ddl()]

        return [
            table.generate_add_column_ddl(column)
            for column in table.columns
            if not self.column_exists(table.name, column.name)
        ]

    def apply(self, table_name: str, statements: list[str]) -> None:
        """Execute statements atomically; nothing is kept on failure.

        Outside a transaction the statements run in their own transaction.
        Inside the caller's transaction they run under a savepoint, so a
        failure undoes only these statements and the caller's transaction
        stays open.

        Raises:
            SchemaReconciliationError: If any statement fails
        """
        if not statements:
            return

        nested = self.connection.in_transaction
        opened = False
        try:
            if nested:
                self.connection.savepoint(RECONCILE_SAVEPOINT)
            else:
                self.connection.begin_transaction(self.transaction_mode)
            opened = True

            for statement in statements:
                self.connection.execute(statement)
                logger.info(f"Executed on {table_name}: {statement}")

            if nested:
                self.connection.release_savepoint(RECONCILE_SAVEPOINT)
            else:
                self.connection.commit_transaction()
        except SqlExecutionError as e:
            logger.error(f"Reconciliation of {table_name} failed, rolling back")
            if opened:
                self._undo(nested)
            raise SchemaReconciliationError(table_name, e.sql) from e

    def _undo(self, nested: bool) -> None:
        # SQLite may already have rolled back the whole transaction
        if not self.connection.in_transaction:
            return
        if nested:
            self.connection.rollback_to_savepoint(RECONCILE_SAVEPOINT)
            self.connection.release_savepoint(RECONCILE_SAVEPOINT)
        else:
            self.connection.rollback_transaction()

    def reconcile(self, table: "Table") -> ReconciliationResult:
        """Bring the live schema up to date with ``table``."""
        start_time = time.perf_counter()

        statements = self.plan(table)
        self.apply(table.name, statements)

        if not statements:
            status = ReconciliationStatus.UNCHANGED
        elif statements[0].startswith("CREATE TABLE"):
            status = ReconciliationStatus.CREATED
        else:
            status = ReconciliationStatus.ALTERED

        result = ReconciliationResult(
            table=table.name,
            status=status,
            statements=statements,
            execution_time_ms=(time.perf_counter() - start_time) * 1000,
        )
        logger.debug(
            f"Reconciliation completed for {table.name}: "
            f"{result.status.value} ({result.execution_time_ms:.1f}ms)"
        )
        return result
