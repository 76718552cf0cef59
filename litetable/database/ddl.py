"""SQLite DDL generation for declared tables."""

from collections.abc import Sequence

from litetable.columns import Column, identity_column
from litetable.exceptions import SchemaDefinitionError


class SQLiteSchemaBuilder:
    """SQLite-specific schema builder."""

    def create_table_sql(
        self, table_name: str, columns: Sequence[Column], use_implicit_id: bool
    ) -> str:
        """Generate CREATE TABLE SQL for SQLite.

        The identity column always comes first unless the table relies on
        SQLite's implicit ROWID, in which case no identity column is emitted.

        Args:
            table_name: Name of the table
            columns: Declared columns in order
            use_implicit_id: Whether the table uses the implicit ROWID

        Returns:
            CREATE TABLE SQL statement

        Raises:
            SchemaDefinitionError: If the table would have no columns
        """
        column_defs: list[str] = []

        if not use_implicit_id:
            column_defs.append(identity_column().ddl())

        column_defs.extend(col.ddl() for col in columns if not col.is_identity)

        if not column_defs:
            raise SchemaDefinitionError(f"Table {table_name} has no columns")

        columns_sql = ", ".join(column_defs)
        return f"CREATE TABLE {table_name} ({columns_sql})"

    def add_column_sql(self, table_name: str, column: Column) -> str:
        """Generate ALTER TABLE ADD COLUMN SQL for SQLite.

        Args:
            table_name: Name of the table
            column: Column definition to add

        Returns:
            ALTER TABLE SQL statement
        """
        return f"ALTER TABLE {table_name} ADD COLUMN {column.ddl()}"
