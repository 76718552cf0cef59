"""Typed column declarations and their SQL value codec.

A column is one of a fixed set of kinds. Each kind knows how to render a
native value as an escaped SQL literal and how to turn a raw SQLite value back
into its native type.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .exceptions import SchemaDefinitionError, ValueConversionError

EXPLICIT_ID_COLUMN_NAME = "id"
IMPLICIT_ID_COLUMN_NAME = "ROWID"
NULL_VALUE = "null"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Precision of date literals; sub-second parts are dropped
DATE_TIMESPEC = "seconds"

# Exceptions that mean "this value cannot be coerced"; anything else propagates
COERCION_ERRORS = (ValueError, TypeError, OverflowError, ArithmeticError)


class ColumnKind(str, Enum):
    """The closed set of column kinds."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    IDENTITY = "identity"


STORAGE_TYPES: dict[ColumnKind, str] = {
    ColumnKind.TEXT: "TEXT",
    ColumnKind.NUMBER: "INT",
    ColumnKind.DATE: "TEXT",
    ColumnKind.IDENTITY: "INTEGER",
}

OUTPUT_TYPES: dict[ColumnKind, type] = {
    ColumnKind.TEXT: str,
    ColumnKind.NUMBER: int,
    ColumnKind.DATE: datetime,
    ColumnKind.IDENTITY: int,
}

IDENTITY_CONSTRAINTS = ("PRIMARY KEY", "AUTOINCREMENT")


def coerce_int64(value: Any) -> int:
    """Coerce a value to a signed 64-bit integer without silent truncation."""
    if isinstance(value, int):
        result = int(value)
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Non-integral number: {value}")
        result = int(value)
    elif isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError(f"Non-integral number: {value}")
        result = int(value)
    elif isinstance(value, str):
        result = int(value.strip())
    else:
        raise TypeError(f"Cannot convert {type(value).__name__} to an integer")

    if not INT64_MIN <= result <= INT64_MAX:
        raise OverflowError(f"Integer out of 64-bit range: {result}")
    return result


def coerce_datetime(value: Any) -> datetime:
    """Coerce a value to a datetime."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to a datetime")


def coerce_text(value: Any) -> str:
    if isinstance(value, bytes | bytearray):
        raise TypeError("Binary values are not supported by text columns")
    return str(value)


def _text_literal(value: Any) -> str:
    escaped = coerce_text(value).replace("'", "''")
    return f"'{escaped}'"


def _number_literal(value: Any) -> str:
    return str(coerce_int64(value))


def _date_literal(value: Any) -> str:
    """Render as datetime('YYYY-MM-DDTHH:MM:SS') on a 24-hour clock.

    Microseconds are dropped and an aware datetime keeps its wall-clock time
    with the offset discarded; SQLite stores naive, whole-second times.
    """
    moment = coerce_datetime(value).replace(tzinfo=None)
    return f"datetime('{moment.isoformat(timespec=DATE_TIMESPEC)}')"


LITERAL_ENCODERS: dict[ColumnKind, Callable[[Any], str]] = {
    ColumnKind.TEXT: _text_literal,
    ColumnKind.NUMBER: _number_literal,
    ColumnKind.DATE: _date_literal,
    ColumnKind.IDENTITY: _number_literal,
}

RAW_DECODERS: dict[ColumnKind, Callable[[Any], Any]] = {
    ColumnKind.TEXT: coerce_text,
    ColumnKind.NUMBER: coerce_int64,
    ColumnKind.DATE: coerce_datetime,
    ColumnKind.IDENTITY: coerce_int64,
}

# What a SQL null reads back as
RAW_DEFAULTS: dict[ColumnKind, Any] = {
    ColumnKind.TEXT: None,
    ColumnKind.NUMBER: 0,
    ColumnKind.DATE: datetime.min,
    ColumnKind.IDENTITY: 0,
}


@dataclass(frozen=True)
class Column:
    """A typed table column."""

    name: str
    kind: ColumnKind
    constraints: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Column name must not be empty")
        # Accept lists for convenience, store an immutable tuple
        object.__setattr__(self, "constraints", tuple(self.constraints))
        if self.kind == ColumnKind.IDENTITY and (
            self.name != EXPLICIT_ID_COLUMN_NAME
            or self.constraints != IDENTITY_CONSTRAINTS
        ):
            raise SchemaDefinitionError(
                f"Identity column must be {EXPLICIT_ID_COLUMN_NAME!r} with "
                f"{' '.join(IDENTITY_CONSTRAINTS)}"
            )

    @property
    def storage_type(self) -> str:
        return STORAGE_TYPES[self.kind]

    @property
    def output_type(self) -> type:
        return OUTPUT_TYPES[self.kind]

    @property
    def is_identity(self) -> bool:
        return self.kind == ColumnKind.IDENTITY

    def ddl(self) -> str:
        """Column definition fragment: name, storage type, then constraints."""
        return f"{self.name} {self.storage_type} {' '.join(self.constraints)}".strip()

    def to_literal(self, value: Any) -> str:
        """Render a native value as an escaped SQL literal.

        Raises:
            ValueConversionError: If the value cannot be coerced to this
                column's type
        """
        if value is None:
            return NULL_VALUE
        try:
            return LITERAL_ENCODERS[self.kind](value)
        except COERCION_ERRORS as e:
            raise ValueConversionError(self.name, value) from e

    def from_raw(self, raw: Any) -> Any:
        """Convert a raw SQLite value to this column's native type.

        SQL null reads back as the type's default value.
        """
        if raw is None:
            return RAW_DEFAULTS[self.kind]
        try:
            return RAW_DECODERS[self.kind](raw)
        except COERCION_ERRORS as e:
            raise ValueConversionError(self.name, raw) from e


def text_column(name: str, *constraints: str) -> Column:
    return Column(name, ColumnKind.TEXT, constraints)


def number_column(name: str, *constraints: str) -> Column:
    return Column(name, ColumnKind.NUMBER, constraints)


def date_column(name: str, *constraints: str) -> Column:
    """A date column; values are stored to the second without a UTC offset."""
    return Column(name, ColumnKind.DATE, constraints)


def identity_column() -> Column:
    """The explicit identity column: ``id INTEGER PRIMARY KEY AUTOINCREMENT``."""
    return Column(EXPLICIT_ID_COLUMN_NAME, ColumnKind.IDENTITY, IDENTITY_CONSTRAINTS)
