"""Exceptions raised by litetable."""

from typing import Any

# Longest slice of an offending value quoted in error messages
MAX_VALUE_PREVIEW = 50


def preview_value(value: Any) -> str:
    """Render a value for an error message, truncated to MAX_VALUE_PREVIEW chars."""
    text = str(value)
    if len(text) > MAX_VALUE_PREVIEW:
        return text[:MAX_VALUE_PREVIEW] + "..."
    return text


class LiteTableError(Exception):
    """Base exception for litetable errors."""

    pass


class ValueConversionError(LiteTableError, ValueError):
    """Raised when a value cannot be coerced to a column's native type."""

    def __init__(self, column: str, value: Any) -> None:
        self.column = column
        self.value = preview_value(value)
        super().__init__(
            f'Error converting value for column "{column}". Value: "{self.value}"'
        )


class ColumnNotFoundError(LiteTableError, KeyError):
    """Raised when a column name does not resolve on a table."""

    def __init__(self, name: str, table: str | None = None) -> None:
        self.name = name
        self.table = table
        self.message = (
            f"Column not found: {name}"
            if table is None
            else f"Column not found: {name} (table {table})"
        )
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class TableNotFoundError(LiteTableError, KeyError):
    """Raised when a table name does not resolve on a database."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        self.message = message or f"Table not found: {name}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class SchemaFrozenError(LiteTableError):
    """Raised when a table is mutated after registration with a database."""

    pass


class SchemaDefinitionError(LiteTableError):
    """Raised when a table declaration is malformed."""

    pass


class DuplicateTableError(LiteTableError):
    """Raised when a table name is registered twice on one database."""

    pass


class DatabaseOpenError(LiteTableError):
    """Raised when the backing SQLite database cannot be opened."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Unable to open database: {path}")


class SqlExecutionError(LiteTableError):
    """Raised when a statement fails; keeps the SQL and parameters for debugging."""

    def __init__(
        self,
        sql: str,
        parameters: dict[str, Any] | None = None,
        message: str = "Error during SQL execution",
    ) -> None:
        self.sql = sql
        self.parameters = dict(parameters or {})
        super().__init__(message)

    def __str__(self) -> str:
        text = f"{self.args[0]}: {self.sql.strip()}"
        if self.parameters:
            text += f" {self.parameters!r}"
        if self.__cause__ is not None:
            text += f" ({self.__cause__})"
        return text


class SchemaReconciliationError(LiteTableError):
    """Raised when a schema probe or corrective DDL statement fails."""

    def __init__(self, table: str, statement: str) -> None:
        self.table = table
        self.statement = statement
        super().__init__(f"Schema reconciliation failed for table {table}")

    def __str__(self) -> str:
        text = f"{self.args[0]}: {self.statement.strip()}"
        if self.__cause__ is not None:
            text += f" ({self.__cause__})"
        return text
