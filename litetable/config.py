"""Configuration management for litetable."""

import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .log import resolve_level
from .types import Environment, TransactionMode

_TRUTHY = ["true", "1", "yes", "on"]


class Settings(BaseModel):
    """Library settings."""

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Runtime environment (development/production/testing)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_sql: bool = Field(
        default=False, description="Log every SQL statement at INFO instead of DEBUG"
    )

    # Database
    database_path: str | None = Field(
        default=None,
        description="Explicit database file; None picks the environment default",
    )
    trust_backing_database: bool = Field(
        default=False,
        description="Skip schema reconciliation when registering tables",
    )
    busy_timeout_ms: int = Field(
        default=60000, ge=0, description="SQLite busy timeout in milliseconds"
    )
    journal_mode: str = Field(default="DELETE", description="SQLite journal mode")
    transaction_mode: TransactionMode = Field(
        default=TransactionMode.DEFERRED,
        description="Locking mode used for reconciliation transactions",
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        # Tests always run against a throwaway in-memory database
        if self.environment == Environment.TESTING and self.database_path is None:
            self.database_path = ":memory:"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        resolve_level(value)
        return value.strip().upper()

    @field_validator("journal_mode")
    @classmethod
    def _check_journal_mode(cls, value: str) -> str:
        mode = value.upper()
        if mode not in {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}:
            raise ValueError(f"Unsupported journal mode: {value}")
        return mode

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING


def load_settings() -> Settings:
    """Load settings from environment variables."""

    # Load .env file if it exists
    load_dotenv()

    trust_backing_database = (
        os.getenv("LITETABLE_TRUST_BACKING_DATABASE", "false").lower() in _TRUTHY
    )
    log_sql = os.getenv("LITETABLE_LOG_SQL", "false").lower() in _TRUTHY

    return Settings(
        environment=Environment(os.getenv("LITETABLE_ENV", "development")),
        log_level=os.getenv("LITETABLE_LOG_LEVEL", "INFO").upper(),
        log_sql=log_sql,
        database_path=os.getenv("LITETABLE_DATABASE_PATH"),
        trust_backing_database=trust_backing_database,
        busy_timeout_ms=int(os.getenv("LITETABLE_BUSY_TIMEOUT_MS", "60000")),
        journal_mode=os.getenv("LITETABLE_JOURNAL_MODE", "DELETE"),
        transaction_mode=TransactionMode(
            os.getenv("LITETABLE_TRANSACTION_MODE", "DEFERRED").upper()
        ),
    )


# Global settings instance
settings = load_settings()
