"""Tests for additive schema reconciliation."""

import pytest

from litetable import (
    Column,
    SchemaReconciliationError,
    SqlExecutionError,
    Table,
    number_column,
    text_column,
)
from litetable.database import (
    ReconciliationStatus,
    SchemaReconciler,
    SQLiteConnection,
)


@pytest.fixture
def reconciler(connection: SQLiteConnection) -> SchemaReconciler:
    return SchemaReconciler(connection)


def people(*extra_columns: Column) -> Table:
    """A people table with a name column plus any extra columns."""
    table = Table("people", text_column("name"), *extra_columns)
    table.ensure_identity_column()
    return table


def test_plan_missing_table(reconciler: SchemaReconciler) -> None:
    """Test that a missing table plans a single CREATE TABLE."""
    assert reconciler.plan(people()) == [
        "CREATE TABLE people (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)"
    ]


def test_reconcile_is_idempotent(reconciler: SchemaReconciler) -> None:
    """Test that a second pass over an up-to-date table does nothing."""
    first = reconciler.reconcile(people())
    second = reconciler.reconcile(people())

    assert first.status == ReconciliationStatus.CREATED
    assert first.changed
    assert second.status == ReconciliationStatus.UNCHANGED
    assert second.statements == []
    assert not second.changed


def test_new_column_is_added(reconciler: SchemaReconciler) -> None:
    """Test that an extended declaration adds exactly the missing column."""
    reconciler.reconcile(people())

    result = reconciler.reconcile(people(number_column("age")))

    assert result.status == ReconciliationStatus.ALTERED
    assert result.statements == ["ALTER TABLE people ADD COLUMN age INT"]
    assert reconciler.column_exists("people", "age")


def test_column_probe_ignores_case(
    connection: SQLiteConnection, reconciler: SchemaReconciler
) -> None:
    """Test that a column matching in a different case counts as present."""
    connection.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, NAME TEXT)")

    assert reconciler.column_exists("people", "name")
    assert reconciler.plan(people()) == []


def test_existing_columns_are_never_dropped(
    connection: SQLiteConnection, reconciler: SchemaReconciler
) -> None:
    """Test that undeclared live columns and their data survive."""
    connection.execute(
        "CREATE TABLE people (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "name TEXT, legacy TEXT)"
    )
    connection.execute("INSERT INTO people (name, legacy) VALUES ('Ann', 'kept')")

    result = reconciler.reconcile(people(number_column("age")))

    assert result.statements == ["ALTER TABLE people ADD COLUMN age INT"]
    assert connection.get_value("SELECT legacy FROM people") == "kept"


def test_type_mismatch_is_not_reconciled(
    connection: SQLiteConnection, reconciler: SchemaReconciler
) -> None:
    """Test that a live column of a different type is left alone."""
    connection.execute(
        "CREATE TABLE people (id INTEGER PRIMARY KEY AUTOINCREMENT, name INT)"
    )

    assert reconciler.plan(people()) == []


def test_failed_statement_rolls_back_everything(
    connection: SQLiteConnection, reconciler: SchemaReconciler
) -> None:
    """Test that one failing ALTER undoes the ones before it."""
    reconciler.reconcile(people())
    table = people(number_column("age"), text_column("email", "UNIQUE"))

    with pytest.raises(SchemaReconciliationError) as exc_info:
        reconciler.reconcile(table)

    error = exc_info.value
    assert error.table == "people"
    assert error.statement == "ALTER TABLE people ADD COLUMN email TEXT UNIQUE"
    assert isinstance(error.__cause__, SqlExecutionError)
    assert not connection.in_transaction
    assert not reconciler.column_exists("people", "age")


def test_table_name_probe_is_exact(
    connection: SQLiteConnection, reconciler: SchemaReconciler
) -> None:
    """Test that a table differing only in case is not matched."""
    connection.execute("CREATE TABLE people (name TEXT)")
    table = Table("People", text_column("name"))

    assert not reconciler.table_exists("People")
    with pytest.raises(SchemaReconciliationError) as exc_info:
        reconciler.reconcile(table)
    assert exc_info.value.statement.startswith("CREATE TABLE People")


def test_probe_failure(
    monkeypatch: pytest.MonkeyPatch, reconciler: SchemaReconciler
) -> None:
    """Test that a failing probe surfaces as a reconciliation error."""

    def failing_query(sql: str, parameters: object = None) -> None:
        raise SqlExecutionError(sql)

    monkeypatch.setattr(reconciler.connection, "query", failing_query)

    with pytest.raises(SchemaReconciliationError) as exc_info:
        reconciler.plan(people())
    assert exc_info.value.table == "people"
    assert "sqlite_master" in exc_info.value.statement


def test_reconcile_inside_open_transaction(
    connection: SQLiteConnection, reconciler: SchemaReconciler
) -> None:
    """Test that DDL joins the caller's transaction without ending it."""
    connection.execute("CREATE TABLE log (message TEXT)")
    connection.begin_transaction()
    connection.execute("INSERT INTO log VALUES ('pending')")

    result = reconciler.reconcile(people())

    assert result.status == ReconciliationStatus.CREATED
    assert connection.in_transaction
    connection.commit_transaction()
    assert reconciler.table_exists("people")
    assert connection.get_value("SELECT message FROM log") == "pending"


def test_failure_inside_open_transaction_keeps_caller_work(
    connection: SQLiteConnection, reconciler: SchemaReconciler
) -> None:
    """Test that a failed reconciliation undoes only its own statements."""
    reconciler.reconcile(people())
    connection.begin_transaction()
    connection.execute("INSERT INTO people (name) VALUES ('Ann')")
    table = people(number_column("age"), text_column("email", "UNIQUE"))

    with pytest.raises(SchemaReconciliationError):
        reconciler.reconcile(table)

    assert connection.in_transaction
    assert not reconciler.column_exists("people", "age")
    connection.commit_transaction()
    assert connection.get_value("SELECT name FROM people") == "Ann"
