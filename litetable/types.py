"""Common type definitions for litetable."""

from collections.abc import Callable
from enum import Enum
from typing import Any, TypeAlias

ParamType: TypeAlias = dict[str, Any] | None
Record: TypeAlias = dict[str, Any]
SqlLogHook: TypeAlias = Callable[[str, dict[str, Any]], None]


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class TransactionMode(str, Enum):
    """SQLite transaction locking modes accepted by BEGIN."""

    DEFERRED = "DEFERRED"
    IMMEDIATE = "IMMEDIATE"
    EXCLUSIVE = "EXCLUSIVE"
