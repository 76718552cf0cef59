"""SQLite connection, schema reconciliation and the Database manager."""

from .config import DatabaseConfig, resolve_database_path
from .connection import (
    MEMORY_DATABASE,
    ResultCursor,
    SQLiteConnection,
    SQLiteTransaction,
)
from .ddl import SQLiteSchemaBuilder
from .manager import Database
from .reconciler import ReconciliationResult, ReconciliationStatus, SchemaReconciler

__all__ = [
    "MEMORY_DATABASE",
    "Database",
    "DatabaseConfig",
    "ReconciliationResult",
    "ReconciliationStatus",
    "ResultCursor",
    "SQLiteConnection",
    "SQLiteSchemaBuilder",
    "SQLiteTransaction",
    "SchemaReconciler",
    "resolve_database_path",
]
