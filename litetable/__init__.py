"""litetable: typed tables over an embedded SQLite database."""

from .columns import (
    EXPLICIT_ID_COLUMN_NAME,
    IMPLICIT_ID_COLUMN_NAME,
    Column,
    ColumnKind,
    date_column,
    identity_column,
    number_column,
    text_column,
)
from .config import Settings, load_settings, settings
from .database import (
    Database,
    ReconciliationResult,
    ReconciliationStatus,
    SchemaReconciler,
)
from .exceptions import (
    ColumnNotFoundError,
    DatabaseOpenError,
    DuplicateTableError,
    LiteTableError,
    SchemaDefinitionError,
    SchemaFrozenError,
    SchemaReconciliationError,
    SqlExecutionError,
    TableNotFoundError,
    ValueConversionError,
)
from .log import (
    configure_logging,
    get_logger,
    setup_logging,
    setup_test_logging,
)
from .records import RecordCodec, TypedResultSet
from .table import Table
from .types import Environment, Record, TransactionMode

__all__ = [
    "EXPLICIT_ID_COLUMN_NAME",
    "IMPLICIT_ID_COLUMN_NAME",
    "Column",
    "ColumnKind",
    "ColumnNotFoundError",
    "Database",
    "DatabaseOpenError",
    "DuplicateTableError",
    "Environment",
    "LiteTableError",
    "ReconciliationResult",
    "ReconciliationStatus",
    "Record",
    "RecordCodec",
    "SchemaDefinitionError",
    "SchemaFrozenError",
    "SchemaReconciler",
    "SchemaReconciliationError",
    "Settings",
    "SqlExecutionError",
    "Table",
    "TableNotFoundError",
    "TransactionMode",
    "TypedResultSet",
    "ValueConversionError",
    "configure_logging",
    "date_column",
    "get_logger",
    "identity_column",
    "load_settings",
    "number_column",
    "settings",
    "setup_logging",
    "setup_test_logging",
    "text_column",
]
